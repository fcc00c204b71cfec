from pathlib import Path
from typing import List

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


_PROJECT_ROOT = Path(__file__).resolve().parents[3]
_ENV_PATH = _PROJECT_ROOT / '.env'
_ENV_FILE = _ENV_PATH if _ENV_PATH.exists() else (_PROJECT_ROOT / '.env.example')


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(_ENV_FILE),
        env_ignore_empty=True,
        extra='ignore',
    )

    PROJECT_NAME: str = 'Appointment Booking'
    VERSION: str = '0.1.0'
    DEBUG: bool = True  # Set to False in production
    LOG_LEVEL: str | None = None  # defaults to DEBUG when DEBUG, else INFO
    LOG_JSON: bool = False  # one JSON object per line on stdout

    # CORS
    BACKEND_CORS_ORIGINS: List[str] = []

    @field_validator('BACKEND_CORS_ORIGINS', mode='before')
    @classmethod
    def assemble_cors_origins(cls, v: str | List[str]) -> List[str]:
        if isinstance(v, str) and not v.startswith('['):
            return [i.strip() for i in v.split(',') if i.strip()]
        elif isinstance(v, list):
            return v
        return []

    # PostgreSQL
    POSTGRES_SERVER: str = 'localhost'
    POSTGRES_USER: str = 'postgres'
    POSTGRES_PASSWORD: SecretStr = SecretStr('postgres')
    POSTGRES_DB: str = 'appointment_booking'
    POSTGRES_PORT: int = 5432
    POSTGRES_REPLICA_SERVER: str | None = None
    POSTGRES_REPLICA_PORT: int | None = None

    # Connection pool
    DB_POOL_SIZE_WRITE: int = 10
    DB_POOL_SIZE_READ: int = 20
    DB_POOL_MAX_OVERFLOW: int = 5
    DB_POOL_TIMEOUT: int = 30  # seconds
    DB_POOL_RECYCLE: int = 3600  # seconds

    # Requests slower than this are logged at WARNING
    SLOW_REQUEST_THRESHOLD_SECONDS: float = 1.0
    DB_POOL_PRE_PING: bool = True

    @property
    def DATABASE_URL_ASYNC(self) -> str:
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}'
        )

    @property
    def DATABASE_READ_URL_ASYNC(self) -> str:
        if not self.POSTGRES_REPLICA_SERVER:
            return self.DATABASE_URL_ASYNC
        port = self.POSTGRES_REPLICA_PORT or self.POSTGRES_PORT
        return (
            f'postgresql+asyncpg://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD.get_secret_value()}'
            f'@{self.POSTGRES_REPLICA_SERVER}:{port}/{self.POSTGRES_DB}'
        )

    # Capacity reservation (locks never renew; expiry is evaluated lazily)
    BOOKING_LOCK_DURATION_SECONDS: int = 120

    # Checkout client (caller side of the booking API)
    BOOKING_API_BASE_URL: str = 'http://localhost:8000'
    CHECKOUT_ACQUIRE_MAX_ATTEMPTS: int = 3
    CHECKOUT_RETRY_BASE_DELAY_SECONDS: float = 1.0  # attempt N waits N x base
    CHECKOUT_LOCK_POLL_INTERVAL_SECONDS: float = 5.0
    CHECKOUT_HTTP_TIMEOUT_SECONDS: float = 10.0


settings = Settings()  # type: ignore
