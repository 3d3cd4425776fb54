"""Application configuration using pydantic-settings.

This module handles configuration from environment variables, .env files, and config.yaml.
"""

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import ValidationInfo, field_validator
from typing import Optional
import logging
import yaml
from pathlib import Path
import sys


logger = logging.getLogger(__name__)


# Weak/default secrets that should never be used in production
INSECURE_DEFAULT_SECRETS = {
    "your-secret-key-change-this-in-production",
    "change-me",
    "changeme",
    "secret",
    "password",
    "default",
}


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    app_name: str = "redemption-service"
    app_version: str = "0.1.0"
    debug: bool = False
    environment: str = "development"  # development, staging, production

    # API
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Database - can be set directly or built from components
    database_url: Optional[str] = None
    database_echo: bool = False  # Log SQL queries

    # Database components (used if database_url not provided)
    postgres_db: str = "redemption"
    postgres_user: str = "redemption"
    postgres_password: str = "redemption"
    postgres_host: str = "localhost"
    postgres_port: int = 5432

    @property
    def db_url(self) -> str:
        """Get database URL, constructing from components if not explicitly set."""
        if self.database_url:
            return self.database_url
        return f"postgresql://{self.postgres_user}:{self.postgres_password}@{self.postgres_host}:{self.postgres_port}/{self.postgres_db}"

    # JWT Authentication
    jwt_secret_key: str = "your-secret-key-change-this-in-production"
    jwt_algorithm: str = "HS256"
    jwt_access_token_expire_minutes: int = 60

    # Logging
    log_level: str = "INFO"

    # CORS
    cors_origins: list = ["http://localhost:3000"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list = ["*"]
    cors_allow_headers: list = ["*"]

    # Redemption codes
    redemption_insert_batch_size: int = 50  # Rows per INSERT chunk when persisting a batch
    items_per_page: int = 10
    max_page_size: int = 100

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret_key(cls, v: str, info: ValidationInfo) -> str:
        """Reject weak default JWT secrets in production, warn elsewhere."""
        if v.lower().strip() in INSECURE_DEFAULT_SECRETS:
            environment = info.data.get("environment", "development")
            if environment == "production":
                logger.critical(
                    "Weak or default JWT secret detected. Generate one with "
                    "`python -c 'import secrets; print(secrets.token_urlsafe(32))'` "
                    "and set JWT_SECRET_KEY (or security.secret_key in config.yaml)."
                )
                sys.exit(1)
            logger.warning("Using a default JWT secret; do not run like this in production")
            return v

        if len(v) < 32:
            logger.warning(
                "JWT secret key is too short (%d characters, at least 32 recommended)", len(v)
            )

        return v

    @field_validator("redemption_insert_batch_size", "items_per_page", "max_page_size")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("must be greater than 0")
        return v


def load_config_yaml(config_path: str = "config.yaml") -> dict:
    """Load configuration from YAML file if it exists."""
    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file, "r") as f:
            return yaml.safe_load(f) or {}
    return {}


def create_settings() -> Settings:
    """Create settings instance with config.yaml overrides."""
    yaml_config = load_config_yaml()

    kwargs = {}

    # Map database config from yaml
    if "database" in yaml_config:
        db = yaml_config["database"]
        if "url" in db:
            kwargs["database_url"] = db["url"]
        else:
            kwargs["database_url"] = f"postgresql://{db.get('user', 'redemption')}:{db.get('password', 'redemption')}@{db.get('host', 'localhost')}:{db.get('port', 5432)}/{db.get('name', 'redemption')}"
        if "echo" in db:
            kwargs["database_echo"] = db["echo"]

    # Map app config
    if "app" in yaml_config:
        app = yaml_config["app"]
        if "environment" in app:
            kwargs["environment"] = app["environment"]
        if "debug" in app:
            kwargs["debug"] = app["debug"]

    # Map security config
    if "security" in yaml_config:
        security = yaml_config["security"]
        if "secret_key" in security:
            kwargs["jwt_secret_key"] = security["secret_key"]
        if "algorithm" in security:
            kwargs["jwt_algorithm"] = security["algorithm"]
        if "access_token_expire_minutes" in security:
            kwargs["jwt_access_token_expire_minutes"] = security["access_token_expire_minutes"]

    # Map API config
    if "api" in yaml_config:
        api = yaml_config["api"]
        if "host" in api:
            kwargs["api_host"] = api["host"]
        if "port" in api:
            kwargs["api_port"] = api["port"]

    # Map CORS config
    if "cors" in yaml_config:
        cors = yaml_config["cors"]
        if "origins" in cors:
            kwargs["cors_origins"] = cors["origins"]
        if "allow_credentials" in cors:
            kwargs["cors_allow_credentials"] = cors["allow_credentials"]
        if "allow_methods" in cors:
            kwargs["cors_allow_methods"] = cors["allow_methods"]
        if "allow_headers" in cors:
            kwargs["cors_allow_headers"] = cors["allow_headers"]

    # Map redemption config
    if "redemption" in yaml_config:
        redemption = yaml_config["redemption"]
        if "insert_batch_size" in redemption:
            kwargs["redemption_insert_batch_size"] = redemption["insert_batch_size"]
        if "items_per_page" in redemption:
            kwargs["items_per_page"] = redemption["items_per_page"]
        if "max_page_size" in redemption:
            kwargs["max_page_size"] = redemption["max_page_size"]

    # Map logging config
    if "logging" in yaml_config:
        if "level" in yaml_config["logging"]:
            kwargs["log_level"] = yaml_config["logging"]["level"]

    # Explicit YAML values take precedence over environment variables
    return Settings(**kwargs)


# Global settings instance
settings = create_settings()
