# storefront/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pathlib import Path
from functools import lru_cache
from typing import List, Optional


class Settings(BaseSettings):
    ENV: str = "development"
    DATA_DIR: Path = Path("data")  # where the CSV tables live
    USERS_FILE: str = "users.csv"
    PRODUCTS_FILE: str = "products.csv"
    ORDERS_FILE: str = "orders.csv"
    CARTS_FILE: str = "carts.csv"

    # seconds to wait for a table file lock or a per-user cart lock
    STORAGE_LOCK_TIMEOUT: float = 5.0

    JWT_SECRET: str = "dev-secret-change-me"
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 24 * 7
    AUTH_COOKIE_NAME: str = "token"

    # comma separated
    CORS_ORIGINS: str = "http://localhost:3000,https://shoppy-ou5z.onrender.com"

    SMTP_HOST: Optional[str] = None
    SMTP_PORT: int = 587
    SMTP_USERNAME: Optional[str] = None
    SMTP_PASSWORD: Optional[str] = None
    SMTP_FROM_EMAIL: Optional[str] = None
    SMTP_FROM_NAME: str = "Shoppy Store"
    SMTP_USE_TLS: bool = True
    SMTP_USE_SSL: bool = False
    SMTP_TIMEOUT: float = 10.0
    ADMIN_EMAIL: Optional[str] = None  # operator copy of every order confirmation

    STORE_NAME: str = "Shoppy Store"
    CURRENCY_SYMBOL: str = "₹"
    LOG_LEVEL: str = "INFO"

    # Example .env:
    # DATA_DIR=./data
    # SMTP_HOST=smtp.gmail.com
    # SMTP_PORT=465
    # SMTP_USE_SSL=true
    # SMTP_USE_TLS=false

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]


@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()


settings = get_settings()
