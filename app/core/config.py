from pydantic_settings import BaseSettings
from typing import Optional, List

class Settings(BaseSettings):
    PROJECT_NAME: str = "Exam Proctoring API"
    VERSION: str = "1.0.0"
    API_V1_STR: str = "/api/v1"

    # CORS
    ALLOWED_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:5173",
        "http://127.0.0.1:5173",
    ]

    # Database Configuration
    DATABASE_HOST: Optional[str] = None
    DATABASE_PORT: str = "5432"
    DATABASE_USER: Optional[str] = None
    DATABASE_PASSWORD: str = ""
    DATABASE_NAME: Optional[str] = None

    DATABASE_URL: str = ""
    TEST_DATABASE_URL: Optional[str] = None

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # Cache (used for violation de-duplication across workers)
    REDIS_URL: Optional[str] = None
    CACHE_TTL: int = 60

    # Exam policy defaults
    DEFAULT_MIN_TIME_GUARANTEE_MINUTES: int = 5
    VIOLATION_THROTTLE_SECONDS: int = 1

    # Expiry sweep
    SCHEDULER_ENABLED: bool = True
    EXPIRY_SWEEP_INTERVAL_SECONDS: int = 30
    EXPIRY_GRACE_SECONDS: int = 10

    def __init__(self, **data):
        super().__init__(**data)
        if not self.DATABASE_URL:
            if self.DATABASE_HOST and self.DATABASE_USER and self.DATABASE_NAME:
                self.DATABASE_URL = (
                    f'postgresql://{self.DATABASE_USER}:{self.DATABASE_PASSWORD}'
                    f'@{self.DATABASE_HOST}:{self.DATABASE_PORT}/{self.DATABASE_NAME}'
                )
            else:
                self.DATABASE_URL = "sqlite:///./proctor.db"

    class Config:
        env_file = ".env"

settings = Settings()
