from functools import lru_cache

from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """
    Application configuration settings loaded from environment variables
    or a `.env` file. Provides strongly typed access to environment values.
    """

    DATABASE_URL: str = "sqlite:///./whisperbox.db"
    """SQLAlchemy database URL (e.g., `postgresql+psycopg://...`, `sqlite:///...`)."""

    FRONTEND_URL: str = "http://localhost:3000"
    """Base URL of the frontend client application, allowed by CORS."""

    SECRET_KEY: str
    """Secret key used for signing session tokens."""

    ALGORITHM: str = "HS256"
    """Cryptographic algorithm used for JWT signing."""

    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    """Duration (in minutes) before session tokens expire."""

    COOKIE_SECURE: bool = True
    """Whether the session cookie is only sent over HTTPS."""

    VERIFY_CODE_TTL_MINUTES: int = 60
    """Lifetime (in minutes) of an issued verification code."""

    SMTP_HOST: str = "smtp.gmail.com"
    """SMTP server used to deliver verification emails."""

    SMTP_PORT: int = 587
    """SMTP port; 587 uses STARTTLS, 465 uses implicit TLS."""

    SENDER_EMAIL: str = ""
    """Email address verification emails are sent from (also the SMTP login)."""

    APP_PASSWORD: str = ""
    """Application-specific password for the sender mailbox."""

    API_KEY: str = ""
    """OpenAI API key used for message suggestions. Empty disables the feature."""

    OPEN_AI_MODEL: str = "gpt-4o-mini"
    """OpenAI model name used for message suggestions."""

    LOG_LEVEL: str = "INFO"
    """Root log level (e.g., `DEBUG`, `INFO`, `WARNING`)."""

    class Config:
        """
        Configuration for Pydantic settings. Loads values from `.env` file by default.
        """
        env_file = ".env"


@lru_cache
def get_settings() -> Settings:
    """Return the process-wide Settings instance, read once from the environment."""
    return Settings()
