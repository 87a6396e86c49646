import os
import re
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, Field

ENV_PREFIX = "SCHEMA_TESTKIT_"
DATABASE_URL_PATTERN = re.compile(r"^SCHEMA_TESTKIT_(?P<key>.+)_URL$")
RESERVED_KEYS = {"BROKER"}

DEFAULT_CONFIG_KEY = "journal"
DEFAULT_BROKER_URL = "redis://localhost:6379"


class DatabaseSettings(BaseModel):
    """Connection settings for one configured database"""
    url: str = Field(..., description="SQLAlchemy database URL")
    pool_size: Optional[int] = Field(None, description="Connection pool size, driver default when unset")
    pool_pre_ping: bool = Field(default=True, description="Test pooled connections before use")
    connect_args: Dict[str, Any] = Field(default_factory=dict, description="Extra DBAPI connect() arguments")
    echo: bool = Field(default=False, description="Log every statement SQLAlchemy emits")


class SchemaSettings(BaseModel):
    """Top level configuration for schema provisioning"""
    databases: Dict[str, DatabaseSettings] = Field(default_factory=dict, description="Databases by config key")
    blocking_pool_size: int = Field(default=8, ge=1, description="Threads reserved for blocking database work")
    broker_url: str = Field(default=DEFAULT_BROKER_URL, description="Celery broker and result backend")
    default_config_key: str = Field(default=DEFAULT_CONFIG_KEY, description="Config key used when none is given")


def load_settings(environ: Optional[Mapping[str, str]] = None) -> SchemaSettings:
    """
    Build settings from environment variables.

    ``SCHEMA_TESTKIT_<KEY>_URL`` declares the database for config key ``<key>``
    (lowercased, as is the default key). ``SCHEMA_TESTKIT_BLOCKING_POOL_SIZE``,
    ``SCHEMA_TESTKIT_BROKER_URL`` (falling back to ``REDIS_URL``) and
    ``SCHEMA_TESTKIT_DEFAULT_CONFIG_KEY`` tune the rest.
    """
    if environ is None:
        environ = os.environ

    databases = {}
    for name, value in environ.items():
        match = DATABASE_URL_PATTERN.match(name)
        if not match or match.group("key") in RESERVED_KEYS:
            continue
        databases[match.group("key").lower()] = DatabaseSettings(url=value)

    values: Dict[str, Any] = {"databases": databases}

    pool_size = environ.get(f"{ENV_PREFIX}BLOCKING_POOL_SIZE")
    if pool_size:
        values["blocking_pool_size"] = int(pool_size)

    broker_url = environ.get(f"{ENV_PREFIX}BROKER_URL") or environ.get("REDIS_URL")
    if broker_url:
        values["broker_url"] = broker_url

    default_key = environ.get(f"{ENV_PREFIX}DEFAULT_CONFIG_KEY")
    if default_key:
        values["default_config_key"] = default_key.lower()

    return SchemaSettings(**values)
