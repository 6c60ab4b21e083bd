# app/core/config.py - Centralized settings management using Pydantic
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings
from typing import List, Optional
from decimal import Decimal
from pathlib import Path


DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",  # Vite dev server
    "http://localhost:5174",
    "http://localhost:3000",
]


class Settings(BaseSettings):
    """Application settings with validation and type safety"""

    # Application Environment
    ENV: str = Field(default="dev", description="Environment: dev, staging, prod")
    DEBUG: bool = Field(default=False, description="Debug mode")
    API_HOST: str = Field(default="0.0.0.0", description="API host")
    API_PORT: int = Field(default=3001, ge=1, le=65535, description="API port")
    API_TITLE: str = Field(default="Institute Fees API", description="API title")
    API_VERSION: str = Field(default="1.0.0", description="API version")

    # Database Configuration
    DATABASE_PATH: Path = Field(default=Path("./data/database.sqlite"), description="SQLite database file")
    DATABASE_ECHO: bool = Field(default=False, description="Echo SQL queries")

    # Storage
    BACKUP_DIR: Path = Field(default=Path("./data/backups"), description="Directory for database snapshots")
    UPLOAD_DIR: Path = Field(default=Path("./uploads"), description="Directory for photos and logos")
    MAX_UPLOAD_SIZE_MB: int = Field(default=5, ge=1, le=50, description="Max upload size in MB")
    ALLOWED_IMAGE_TYPES: List[str] = Field(
        default=[".jpeg", ".jpg", ".png", ".gif"],
        description="Allowed image extensions"
    )

    # Fee policy
    MONTHLY_FEE: Decimal = Field(default=Decimal("500"), ge=0, description="Flat fee charged per month")

    # Institute defaults used to seed the settings row
    DEFAULT_INSTITUTE_NAME: str = Field(default="Jawaharlal Nehru National Youth Centre")
    DEFAULT_INSTITUTE_ADDRESS: str = Field(default="Your Institute Address Here")
    DEFAULT_RECEIPT_PREFIX: str = Field(default="JNN", max_length=16)

    # CORS Configuration (comma-separated)
    CORS_ORIGINS: str = Field(default=",".join(DEFAULT_CORS_ORIGINS), description="CORS allowed origins")
    CORS_ALLOW_CREDENTIALS: bool = Field(default=True, description="Allow CORS credentials")

    # Logging Configuration
    LOG_LEVEL: str = Field(default="INFO", description="Logging level")
    LOG_FORMAT: str = Field(default="detailed", description="Log format: simple, detailed")
    LOG_FILE_PATH: Optional[str] = Field(default=None, description="Log file path")
    LOG_MAX_SIZE: int = Field(default=10485760, description="Max log file size in bytes (10MB)")
    LOG_BACKUP_COUNT: int = Field(default=5, description="Number of log backup files")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"  # Ignore extra environment variables

    @field_validator("ENV")
    @classmethod
    def validate_environment(cls, v):
        allowed_envs = ["dev", "development", "staging", "prod", "production"]
        if v.lower() not in allowed_envs:
            raise ValueError(f"ENV must be one of: {allowed_envs}")
        return v.lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def validate_log_level(cls, v):
        allowed_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in allowed_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {allowed_levels}")
        return v.upper()

    @field_validator("LOG_FORMAT")
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ("simple", "detailed"):
            raise ValueError("LOG_FORMAT must be 'simple' or 'detailed'")
        return v.lower()

    @field_validator("DEFAULT_RECEIPT_PREFIX")
    @classmethod
    def validate_receipt_prefix(cls, v):
        if not v.strip():
            raise ValueError("DEFAULT_RECEIPT_PREFIX cannot be empty")
        return v.strip().upper()

    @property
    def is_development(self) -> bool:
        """Check if running in development mode"""
        return self.ENV in ["dev", "development"]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode"""
        return self.ENV in ["prod", "production"]

    @property
    def database_url(self) -> str:
        """SQLAlchemy URL for the SQLite file"""
        return f"sqlite:///{Path(self.DATABASE_PATH).resolve()}"

    @property
    def cors_origins(self) -> List[str]:
        origins = [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]
        return origins or list(DEFAULT_CORS_ORIGINS)

    @property
    def max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes"""
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024


# Create settings instance with validation
try:
    settings = Settings()
except Exception as e:
    print(f"Configuration error: {e}")
    print("Please check your .env file and environment variables")
    raise

# Export settings
__all__ = ["settings", "Settings"]
