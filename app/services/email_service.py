from fastapi_mail import FastMail, MessageSchema, ConnectionConfig
from config import EMAIL_FROM, EMAIL_FROM_NAME, EMAIL_PORT, EMAIL_SERVER


class EmailService:
    def __init__(self):
        try:
            self.config = ConnectionConfig(
                MAIL_USERNAME="",
                MAIL_PASSWORD="",
                MAIL_FROM=EMAIL_FROM,
                MAIL_PORT=EMAIL_PORT,
                MAIL_SERVER=EMAIL_SERVER,
                MAIL_FROM_NAME=EMAIL_FROM_NAME,
                MAIL_STARTTLS=False,
                MAIL_SSL_TLS=False,
                USE_CREDENTIALS=False,
                VALIDATE_CERTS=False,
            )
            self.mailer = FastMail(self.config)
        except Exception as e:
            raise Exception(f"Failed to initialize email service: {str(e)}")

    async def send_email(self, to_email: str, subject: str, body: str):
        """Send a generic email"""
        message = MessageSchema(
            subject=subject,
            recipients=[to_email],
            body=body,
            subtype="plain",
        )
        await self.mailer.send_message(message)

    async def send_tenant_welcome_email(
        self, email: str, name: str, pg_name: str, room_number: str, monthly_rent: float
    ):
        """Existing account holder moves into their first room with this owner."""
        await self.send_email(
            email,
            f"🏠 Welcome to {pg_name}!",
            f"""Hello {name},

Your onboarding request has been approved. Welcome to {pg_name}!

Room: {room_number}
Monthly rent: {monthly_rent:.2f}

You can now sign in with your existing account to see your room, payments and notices.

Best regards,
The HostelMate Team""",
        )

    async def send_tenant_onboarding_with_password_email(
        self,
        email: str,
        name: str,
        pg_name: str,
        room_number: str,
        monthly_rent: float,
        temporary_password: str,
    ):
        """Account had no usable credentials, so it ships a temporary password."""
        await self.send_email(
            email,
            f"🔐 Welcome to {pg_name} - Your Login Details",
            f"""Hello {name},

Your onboarding request has been approved. Welcome to {pg_name}!

Room: {room_number}
Monthly rent: {monthly_rent:.2f}

Sign in with this email address and your temporary password: {temporary_password}

For security reasons, please change this temporary password after logging in.

Best regards,
The HostelMate Team""",
        )

    async def send_tenant_onboarding_existing_user_email(
        self, email: str, name: str, pg_name: str, room_number: str, monthly_rent: float
    ):
        """Returning tenant of the same owner, moved into a new room or PG."""
        await self.send_email(
            email,
            f"🔄 Your stay has moved to {pg_name}",
            f"""Hello {name},

Welcome back! Your onboarding request has been approved and your tenancy now points to {pg_name}.

Room: {room_number}
Monthly rent: {monthly_rent:.2f}

Your previous login keeps working. Your dashboard now shows the new room.

Best regards,
The HostelMate Team""",
        )
