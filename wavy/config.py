# wavy/config.py

from pathlib import Path

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    """
    Manages application-wide settings loaded from the environment or a .env file.
    """
    model_config = SettingsConfigDict(env_file='.env', env_ignore_empty=True, extra="ignore")

    # --- Core Application Settings ---
    APP_ENV: str = "dev"
    FRONTEND_BASE_URL: str = "http://localhost:8080"
    COMPANY_NAME: str = "Wavy Services"
    TIMEZONE: str = "Europe/Paris"

    # --- JWT (HS256) Authentication ---
    JWT_SECRET: str = "changeme"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRATION_MINUTES: int = 7 * 24 * 60
    BCRYPT_ROUNDS: int = 12

    # --- Database ---
    DATABASE_URL: str = "sqlite:///./wavy.db"

    # --- Outbound email (Resend) ---
    RESEND_API_KEY: str = ""
    RESEND_API_URL: str = "https://api.resend.com/emails"
    EMAIL_FROM: str = "Wavy Services <noreply@wavyservices.fr>"
    EMAIL_TIMEOUT_SECONDS: int = 15

    # --- Uploads ---
    UPLOAD_DIR: Path = Path("./uploads")
    MAX_UPLOAD_BYTES: int = 10 * 1024 * 1024

    # --- Token lifetimes ---
    OTP_TTL_MINUTES: int = 10
    OTP_REMEMBER_DAYS: int = 180
    OTP_LOGIN_ENABLED: bool = False
    RESET_TOKEN_TTL_MINUTES: int = 60
    INVITATION_TTL_DAYS: int = 7
    CRA_VALIDATION_TTL_DAYS: int = 30

    # --- Rate limiting (per client address, fixed window) ---
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_PERIOD_SECONDS: int = 15 * 60
    RATE_LIMIT_REQUESTS: int = 200
    AUTH_RATE_LIMIT_REQUESTS: int = 20

    # --- Logging ---
    LOG_LEVEL: str = "INFO"
    LOG_FILE: str | None = None

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if value.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of: {valid_levels}')
        return value.upper()

    @property
    def cors_origins(self) -> list[str]:
        return [
            self.FRONTEND_BASE_URL,
            "http://localhost:8080",
            "http://localhost:5173",
        ]

    @property
    def cv_upload_dir(self) -> Path:
        return self.UPLOAD_DIR / "cvs"


settings = Settings()
