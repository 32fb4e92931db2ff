# pos_admin/core/config.py

from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal

class Settings(BaseSettings):
    # App
    ENV: str = "development"
    DEBUG: bool = False

    # Security
    SECRET_KEY: str
    ALGORITHM: Literal["HS256", "HS384", "HS512"] = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24
    BCRYPT_ROUNDS: int = 12

    # Database
    DATABASE_URL: str = "sqlite:///./database/pos.db"
    DATABASE_BUSY_TIMEOUT: int = 30

    # Sale posting
    SALE_POST_MAX_ATTEMPTS: int = 3
    SALE_POST_RETRY_DELAY: float = 0.05

    # Inventory
    LOW_STOCK_THRESHOLD: int = 10

    # Seeding
    SEED_DEMO_DATA: bool = True
    ADMIN_EMAIL: str = "admin@pos.com"
    ADMIN_PASSWORD: str = "admin123"
    ADMIN_NAME: str = "Administrator"

    # HTTP
    RATE_LIMIT_ENABLED: bool = True
    CORS_ORIGINS: list[str] = [
        "http://127.0.0.1:3000",
        "http://localhost:3000",
    ]



    model_config = SettingsConfigDict(
        env_file=".env",
        extra="forbid",
    )


settings = Settings()
