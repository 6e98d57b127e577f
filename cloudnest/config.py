# Filename: cloudnest/config.py
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field
from typing import Literal, Optional

from . import __version__


class Settings(BaseSettings):
    # Core
    environment: Literal["development", "staging", "production"] = "development"
    debug: bool = False
    app_name: str = "CloudNest"
    app_version: str = __version__

    secret_key: str = Field(..., description="JWT secret key - required")
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60 * 24 * 7
    activation_token_expire_minutes: int = 15
    reset_token_expire_minutes: int = 60

    database_url: str = Field(..., description="Database connection string")

    # frontend that receives activation / reset links
    client_url: str = "http://localhost:5173"

    max_upload_size_mb: int = 500

    # S3-compatible blob store
    s3_bucket: str = "cloudnest"
    s3_region: str = "us-east-1"
    s3_endpoint_url: Optional[str] = None
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None

    # outgoing mail; empty host means links are only logged
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_user: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_sender: str = "CloudNest <no-reply@cloudnest.local>"

    cors_allow_origins: str = "http://localhost:5173"
    cors_allow_credentials: bool = True
    cors_allow_methods: str = "GET,POST,PUT,DELETE,OPTIONS"
    cors_allow_headers: str = "Content-Type,Authorization"

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    model_config = SettingsConfigDict(
        env_prefix="CLOUDNEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )


settings = Settings()
