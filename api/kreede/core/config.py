"""Application configuration from environment variables."""

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # App
    app_name: str = "Kreede Admin"
    debug: bool = True
    secret_key: str = "dev-secret-change-in-production"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://kreede:kreede@db:5432/kreede_booking"
    database_echo: bool = False

    # Auth
    jwt_algorithm: str = "HS256"
    jwt_expires_days: int = 180
    auth_cookie_name: str = "auth"
    cookie_secure: bool = False

    # Billing
    currency: str = "INR"
    slot_price: int = 500  # per court slot for non-members

    # Search
    member_search_limit: int = 150

    model_config = {"env_prefix": "KR_", "env_file": ".env", "extra": "ignore"}


settings = Settings()
