import logging
from typing import Dict

from sqlalchemy.engine import Engine

from schema_testkit.errors import UnsupportedDialect
from .classes import SchemaDialect

logger = logging.getLogger(__name__)

# SQLAlchemy dialect names plus the schema directory names
PROFILES: Dict[str, SchemaDialect] = {
    "postgresql": SchemaDialect.POSTGRES,
    "postgres": SchemaDialect.POSTGRES,
    "mysql": SchemaDialect.MYSQL,
    "mariadb": SchemaDialect.MYSQL,
    "oracle": SchemaDialect.ORACLE,
    "mssql": SchemaDialect.SQLSERVER,
    "sqlserver": SchemaDialect.SQLSERVER,
    "h2": SchemaDialect.H2,
    "sqlite": SchemaDialect.SQLITE,
}


def resolve_dialect(profile: str) -> SchemaDialect:
    """Map a connection profile identifier to its schema dialect.

    Unknown profiles raise ``UnsupportedDialect``; there is no fallback.
    """
    key = (profile or "").strip().lower()
    try:
        dialect = PROFILES[key]
    except KeyError:
        raise UnsupportedDialect(profile) from None

    logger.debug(f"Resolved connection profile {profile!r} to {dialect.name}")
    return dialect


def dialect_for_engine(engine: Engine) -> SchemaDialect:
    return resolve_dialect(engine.dialect.name)
