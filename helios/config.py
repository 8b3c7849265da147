from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    STORAGE_BACKEND: str = "redis"  # redis | memory
    REDIS_URL: str = "redis://localhost:6379/2"
    SESSION_KEY: str = "helios_user"
    COOKIE_MAX_AGE: int = 2592000  # 30 days
    SIMULATED_LATENCY_MS: int = 1000
    SIMULATED_FAILURE_RATE: float = 0.0
    LOG_LEVEL: str = "INFO"
    RATE_LIMIT_PER_MINUTE: int = 60
    LOGIN_RATE_LIMIT: str = "10/minute"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()
