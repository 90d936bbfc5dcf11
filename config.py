# config.py
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    MONGO_URI: str = "mongodb://localhost:27017"
    DB_NAME: str = "inventory"

    JWT_SECRET: str = "change-me-in-production-0123456789abcdef"
    JWT_ALGORITHM: str = "HS256"
    JWT_EXPIRE_MINUTES: int = 60 * 24

    AUTH_COOKIE_NAME: str = "auth_token"
    COOKIE_SECURE: bool = False

    LOG_LEVEL: str = "INFO"

    model_config = {
        "extra": "ignore",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }


settings = Settings()
