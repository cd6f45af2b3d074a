from enum import Enum


class WelcomeTemplate(str, Enum):
    """Which welcome email a completed onboarding sends"""

    WELCOME = "welcome"
    WITH_PASSWORD = "with_password"
    EXISTING_USER = "existing_user"

    def __str__(self):
        return self.value
