import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Type

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError

from teamcomm.core.exceptions import ConfigurationError
from teamcomm.core.logging_config import logger

CONFIG_ENV_VAR = "OPENTEAM_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".openteam" / "config.yml"

DEFAULT_CONFIG: Dict[str, Any] = {
    "database": {
        "url": "postgresql://localhost:5432/openteam",
        "username": "openteam_user",
        "password": "your_secure_password",
        "driver": "postgresql+psycopg2",
    },
    "application": {
        "refreshInterval": 10,
        "sessionDurationHours": 8,
    },
}


class DatabaseSettings(BaseModel):
    url: str = DEFAULT_CONFIG["database"]["url"]
    username: Optional[str] = None
    password: Optional[str] = None
    driver: Optional[str] = None

    pool_size: int = 10
    max_overflow: int = 20
    pool_timeout: int = 30
    pool_recycle: int = 3600

    def sqlalchemy_url(self) -> URL:
        """
        Build the SQLAlchemy URL from the configured connection string.

        Accepts JDBC-style urls ("jdbc:postgresql://..."). The driver is only
        used when it is a SQLAlchemy drivername; Java class names such as
        org.postgresql.Driver are ignored.

        Raises:
            ConfigurationError: If the url cannot be parsed
        """
        raw = self.url.strip()
        if raw.startswith("jdbc:"):
            raw = raw[len("jdbc:"):]
        try:
            url = make_url(raw)
        except ArgumentError as e:
            raise ConfigurationError(f"Invalid database url {self.url!r}: {e}")

        overrides: Dict[str, Any] = {}
        if self.username and url.username is None:
            overrides["username"] = self.username
        if self.password and url.password is None:
            overrides["password"] = self.password
        if self.driver and "." not in self.driver and self.driver.split("+")[0] == url.get_backend_name():
            overrides["drivername"] = self.driver
        return url.set(**overrides) if overrides else url


class ApplicationSettings(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    refresh_interval: int = Field(default=10, alias="refreshInterval")
    session_duration_hours: int = Field(default=8, alias="sessionDurationHours")


class Settings(BaseSettings):
    database: DatabaseSettings = DatabaseSettings()
    application: ApplicationSettings = ApplicationSettings()

    # Takes precedence over database.url when set, as in a hosted deployment
    DATABASE_URL: Optional[str] = None

    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = ["http://localhost:3000"]

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore"
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: Type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> Tuple[PydanticBaseSettingsSource, ...]:
        # Environment beats the YAML document, which arrives as init kwargs
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    def database_url(self) -> URL:
        if self.DATABASE_URL:
            return DatabaseSettings(url=self.DATABASE_URL).sqlalchemy_url()
        return self.database.sqlalchemy_url()


def config_path() -> Path:
    configured = os.getenv(CONFIG_ENV_VAR)
    return Path(configured).expanduser() if configured else DEFAULT_CONFIG_PATH


def write_default_config(path: Path) -> None:
    """Create the config file with placeholder values the user must edit."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        yaml.safe_dump(DEFAULT_CONFIG, f, default_flow_style=False, sort_keys=False)
    logger.warning(f"Created default configuration at {path}; update the database credentials")


def load_settings(config_file: Optional[Path] = None) -> Settings:
    """
    Load settings from the YAML config file, .env and the environment.

    The YAML file is created with defaults when it does not exist yet.

    Args:
        config_file: Explicit path; falls back to $OPENTEAM_CONFIG or
            ~/.openteam/config.yml

    Returns:
        Settings instance

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping
    """
    load_dotenv()
    path = Path(config_file) if config_file else config_path()

    try:
        if not path.exists():
            write_default_config(path)
        with path.open("r", encoding="utf-8") as f:
            document = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read configuration file {path}: {e}")

    if not isinstance(document, dict):
        raise ConfigurationError(f"Configuration file {path} must contain a mapping")

    logger.info(f"Loaded configuration from {path}")
    return Settings(**document)
