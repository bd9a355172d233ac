from typing import List

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application Settings
    APP_NAME: str = "HR Personnel Service"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ENVIRONMENT: str = "development"

    # Database Settings
    DB_NAME: str = "hrms_db"
    DB_USER: str = "root"
    DB_PASSWORD: str = "root"
    DB_HOST: str = "localhost"
    DB_PORT: int = 3306
    DB_CHARSET: str = "utf8"
    DATABASE_URL: str | None = None  # Overrides the DB_* settings (e.g. sqlite)

    # Encryption Settings
    ENCRYPTION_KEY: str = ""  # Comma-separated Fernet keys, newest first
    SECRET_KEY: str = "change-me-in-production"

    # Kafka Settings
    KAFKA_BOOTSTRAP_SERVERS: str = "localhost:9092"
    KAFKA_ENABLED: bool = True
    KAFKA_CONSUMER_GROUP: str = "hr-notification-dispatcher"
    NOTIFICATION_MAX_ATTEMPTS: int = 3

    # Change Feed Settings
    CHANGE_FEED_BATCH_SIZE: int = 100
    CHANGE_FEED_POLL_INTERVAL: float = 1.0

    # Email (SES) Settings
    AWS_REGION: str = "us-east-1"
    HR_ADMIN_EMAIL: str = ""  # Optional: admin summaries are skipped when empty
    HR_ADMIN_EMAIL_FROM: str = "no-reply@example.com"  # Must be a verified SES identity

    # Attendance Rules
    MAX_WORK_HOURS: float = 12
    MIN_BREAK_MINUTES: float = 30
    STANDARD_WORK_HOURS: float = 8

    # CORS Settings
    CORS_ORIGINS: str = "https://localhost,http://localhost:3000"
    CORS_ALLOW_CREDENTIALS: bool = True
    CORS_ALLOW_METHODS: List[str] = ["*"]
    CORS_ALLOW_HEADERS: List[str] = ["*"]

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS_ORIGINS from comma-separated string."""
        if isinstance(self.CORS_ORIGINS, str):
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",")]
        return [self.CORS_ORIGINS]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def database_url(self) -> str:
        """Generate the database URL, preferring an explicit DATABASE_URL."""
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"mysql+mysqldb://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}?charset={self.DB_CHARSET}"

    @property
    def database_url_without_db(self) -> str:
        """Generate MySQL URL without database name (for initial connection)."""
        return f"mysql+mysqldb://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}?charset={self.DB_CHARSET}"

    class Config:
        env_file = ".env"
        case_sensitive = True


# Create global settings instance
settings = Settings()
