from dotenv import load_dotenv
import os
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

# Database configuration
DB_HOST = os.getenv("MYSQL_HOST", "db")
DB_USER = os.getenv("MYSQL_USER", "user")
DB_PASSWORD = os.getenv("MYSQL_PASSWORD", "123456")
DB_NAME = os.getenv("MYSQL_DB", "hostelmate")
DB_PORT = os.getenv("MYSQL_PORT", "3306")

# JWT configuration
SECRET_KEY = os.getenv("SECRET_KEY", "your_secret_key_here")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# Application configuration
DEBUG = os.getenv("DEBUG", "false").lower() == "true"
APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
APP_PORT = int(os.getenv("APP_PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Email configuration
EMAIL_FROM = os.getenv("EMAIL_FROM", "no-reply@hostelmate.app")
EMAIL_FROM_NAME = os.getenv("EMAIL_FROM_NAME", "HostelMate")
EMAIL_PORT = int(os.getenv("EMAIL_PORT", "1025"))
EMAIL_SERVER = os.getenv("EMAIL_SERVER", "mailhog")

# Database URL, a full DATABASE_URL wins over the MySQL parts
DATABASE_URL = os.getenv(
    "DATABASE_URL",
    f"mysql+pymysql://{DB_USER}:{DB_PASSWORD}@{DB_HOST}:{DB_PORT}/{DB_NAME}",
)


class WorkflowSettings(BaseSettings):
    """Tunables for the visit / onboarding workflow."""

    enforce_visit_date_on_complete: bool = True
    require_visit_before_onboarding: bool = False
    temporary_password_length: int = 10
    email_timeout_seconds: float = 10.0
    room_update_retries: int = 3

    model_config = SettingsConfigDict(env_prefix="WORKFLOW_", extra="ignore")


workflow_settings = WorkflowSettings()
