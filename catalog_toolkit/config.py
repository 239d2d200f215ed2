"""
Configuration module for Catalog Toolkit.

Provides centralized configuration management for the data access layer,
the catalog services and the command-line interface.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional, Union, get_args, get_origin

import pytz
from pydantic import BaseModel, Field, field_validator


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


class CatalogConfig(BaseModel):
    """Central configuration for the catalog toolkit.

    Configuration can be set programmatically or loaded from environment
    variables using the ``CATALOG_`` prefix.

    Configuration Sources (in order of precedence):
        1. Programmatic settings (highest priority)
        2. Environment variables (CATALOG_ prefix)
        3. Default values (lowest priority)

    Example:
        >>> config = CatalogConfig(
        ...     database_url="sqlite:///:memory:",
        ...     default_actor="importer",
        ... )

        Loading from environment:

        >>> import os
        >>> os.environ['CATALOG_DATABASE_URL'] = 'postgresql://localhost/catalog'
        >>> config = CatalogConfig.from_env()

    Environment Variables:
        - CATALOG_DATABASE_URL
        - CATALOG_TIMEZONE
        - CATALOG_DEFAULT_ACTOR
        - CATALOG_CASCADE_SOFT_DELETE

    Note:
        The timezone setting controls every audit and deletion timestamp the
        repository writes. Changing it on a populated database mixes stamps
        from different zones.
    """

    # General settings
    application_name: str = Field(
        "Catalog Service", description="Name of the application"
    )
    environment: str = Field(
        "production", description="Environment (development, staging, production)"
    )
    timezone: str = Field("UTC", description="Timezone for audit timestamps")
    log_level: LogLevel = Field(LogLevel.INFO, description="Root log level")

    # Database settings
    database_url: str = Field(
        "sqlite:///catalog.db", description="SQLAlchemy database URL"
    )
    echo_sql: bool = Field(False, description="Log emitted SQL statements")

    # Audit settings
    default_actor: str = Field(
        "SYSTEM", description="Recorded as created_by when no actor is bound"
    )

    # Paging settings
    default_page_size: int = Field(
        20, description="Page size when none is requested", gt=0
    )
    max_page_size: int = Field(
        500, description="Upper bound for requested page sizes", gt=0
    )

    # Soft delete settings
    cascade_soft_delete: bool = Field(
        True, description="Soft delete a book's detail together with the book"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is valid."""
        valid_environments = {"development", "staging", "production", "test"}
        if v.lower() not in valid_environments:
            raise ValueError(
                f"Environment must be one of: {', '.join(sorted(valid_environments))}"
            )
        return v.lower()

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, v: str) -> str:
        """Ensure timezone is known to pytz."""
        try:
            pytz.timezone(v)
        except pytz.UnknownTimeZoneError:
            raise ValueError(f"Unknown timezone: {v}")
        return v

    @field_validator("default_actor")
    @classmethod
    def validate_default_actor(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("Default actor must not be empty")
        return v.strip()

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to dictionary."""
        return self.model_dump(mode="json")

    def now(self) -> datetime:
        """Current time in the configured timezone, without tzinfo."""
        return datetime.now(pytz.timezone(self.timezone)).replace(tzinfo=None)

    @classmethod
    def from_env(cls, prefix: str = "CATALOG_") -> "CatalogConfig":
        """
        Load configuration from environment variables.

        Args:
            prefix: Prefix for environment variables

        Returns:
            Configuration instance
        """
        import os

        config_dict: Dict[str, Any] = {}

        for field_name, field_info in cls.model_fields.items():
            env_var = f"{prefix}{field_name.upper()}"
            if env_var in os.environ:
                value = os.environ[env_var]

                field_type = field_info.annotation

                # Handle Optional types
                if get_origin(field_type) is Union:
                    args = get_args(field_type)
                    field_type = next(
                        (arg for arg in args if arg is not type(None)), str
                    )

                try:
                    if field_type == bool:
                        config_dict[field_name] = value.lower() in (
                            "true",
                            "1",
                            "yes",
                            "on",
                        )
                    elif field_type == int:
                        config_dict[field_name] = int(value)
                    elif isinstance(field_type, type) and issubclass(field_type, Enum):
                        config_dict[field_name] = field_type(value.upper())
                    else:
                        config_dict[field_name] = value
                except (ValueError, TypeError):
                    # Let model validation report the bad value
                    config_dict[field_name] = value

        return cls.model_validate(config_dict)


# Global configuration instance
_config: Optional[CatalogConfig] = None


def get_config() -> CatalogConfig:
    """
    Get the global configuration instance.

    Returns:
        Global configuration
    """
    global _config

    if _config is None:
        _config = CatalogConfig.from_env()

    return _config


def set_config(config: Optional[CatalogConfig]) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Configuration to set, or None to reload from the environment
            on next access
    """
    global _config
    _config = config


def configure(**kwargs: Any) -> CatalogConfig:
    """
    Configure the toolkit with keyword arguments.

    Args:
        **kwargs: Configuration parameters

    Returns:
        Updated configuration
    """
    global _config

    if _config is None:
        _config = CatalogConfig(**kwargs)
    else:
        config_dict = _config.model_dump()
        config_dict.update(kwargs)
        _config = CatalogConfig(**config_dict)

    return _config
