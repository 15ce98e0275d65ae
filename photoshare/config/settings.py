from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import AliasChoices, Field, field_validator


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore"
    )

    # Application settings
    app_host: str = "127.0.0.1"
    app_port: int = 5000
    debug: bool = False
    cors_origins: str = "*"

    # Auth
    jwt_secret: str = "change-me"
    jwt_algorithm: str = "HS256"
    access_token_expire_hours: int = 24

    # Database settings
    database_url: str = "sqlite:///./photoshare.db"

    # Uploads
    max_upload_size: int = Field(
        10485760,
        validation_alias=AliasChoices("max_upload_size", "MAX_UPLOAD_SIZE", "MAX_FILE_SIZE"),
    )  # 10MB
    max_files_per_upload: int = 50
    upload_path: str = "./uploads"

    # Logging
    log_level: str = "INFO"

    @field_validator('max_upload_size', 'max_files_per_upload', 'access_token_expire_hours')
    @classmethod
    def must_be_positive(cls, v):
        if v <= 0:
            raise ValueError("must be a positive integer")
        return v

    def get_cors_origins_list(self) -> List[str]:
        """Разобрать список разрешенных origin'ов"""
        return [origin.strip() for origin in self.cors_origins.split(',') if origin.strip()]


def get_settings() -> Settings:
    """Загрузить настройки из окружения"""
    return Settings()
