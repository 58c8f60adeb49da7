from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    jwt_secret_key: str = Field(..., alias="JWT_SECRET_KEY")
    jwt_algorithm: str = Field("HS256", alias="JWT_ALGORITHM")
    access_token_expire_minutes: int = Field(720, alias="ACCESS_TOKEN_EXPIRE_MINUTES")

    # Bootstrap admin credential; hashed when written to admin_settings
    admin_username: str = Field("admin", alias="ADMIN_USERNAME")
    admin_password: str = Field("admin", alias="ADMIN_PASSWORD")
    min_password_length: int = Field(6, alias="MIN_PASSWORD_LENGTH")

    activation_code_prefix: str = Field("APPLE", alias="ACTIVATION_CODE_PREFIX")
    default_code_valid_days: int = Field(7, alias="DEFAULT_CODE_VALID_DAYS")
    default_renew_days: int = Field(30, alias="DEFAULT_RENEW_DAYS")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
