from pydantic_settings import BaseSettings


class Config(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str
    host: str
    port: int
    debug: bool
    access_token_secret: str  # HS256 secret shared by all access tokens
    access_token_ttl_minutes: int = 15
    refresh_token_ttl_days: int = 10
    cors_origins: list[str] = []

    model_config = {
        "env_file": [".env"],
        "env_prefix": "POSTBOARD_",
        "extra": "ignore",
    }
