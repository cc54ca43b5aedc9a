from typing import List, Optional
from urllib.parse import quote_plus

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="allow",
    )

    ENV: str = "production"

    # A full URL wins over the individual postgres parts
    DATABASE_URL: Optional[str] = None
    postgres_user: str = "postgres"
    postgres_password: str = ""
    postgres_db: str = "boutique"
    postgres_host: str = "localhost"
    postgres_port: str = "5432"

    # Payment gateway. Checked when a payment endpoint is called, not at startup.
    RAZORPAY_KEY_ID: Optional[str] = None
    RAZORPAY_KEY_SECRET: Optional[str] = None
    RAZORPAY_WEBHOOK_SECRET: Optional[str] = None

    # Admin back-office session
    ADMIN_EMAIL: Optional[str] = None
    ADMIN_PASSWORD: Optional[str] = None
    ADMIN_JWT_SECRET: Optional[str] = None
    admin_jwt_algorithm: str = "HS256"
    admin_session_hours: int = 24

    # Checkout
    SHIPPING_COST: int = 99
    CURRENCY: str = "INR"
    MAX_QUANTITY_PER_LINE: int = 10

    # In-stock products below this quantity count as low stock on the dashboard
    LOW_STOCK_THRESHOLD: int = 5

    # Create-order throttling, per client per window
    ORDER_RATE_LIMIT: int = 10
    ORDER_RATE_WINDOW_SECONDS: int = 60
    # Proxies in front of the app that append to X-Forwarded-For; 0 trusts only the socket peer
    TRUSTED_PROXY_HOPS: int = 0

    cors_origins: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    @property
    def database_url(self):
        if self.DATABASE_URL:
            return self.DATABASE_URL
        encoded_password = quote_plus(self.postgres_password)
        return (
            f"postgresql+psycopg2://{self.postgres_user}:"
            f"{encoded_password}@{self.postgres_host}:"
            f"{self.postgres_port}/{self.postgres_db}"
        )


settings = Settings()
