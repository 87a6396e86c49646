from importlib import resources
from typing import Dict
import logging

from schema_testkit.errors import ScriptNotFound, UnmappedScript
from .classes import SchemaDialect, ScriptOperation, ScriptReference

logger = logging.getLogger(__name__)

RESOURCE_PACKAGE = "schema_testkit"

# Oracle scripts terminate PL/SQL blocks with "/" since the blocks contain ";"
CREATE_SCRIPTS: Dict[SchemaDialect, ScriptReference] = {
    SchemaDialect.POSTGRES: ScriptReference("schema/postgres/postgres-create-schema.sql", ";"),
    SchemaDialect.MYSQL: ScriptReference("schema/mysql/mysql-create-schema.sql", ";"),
    SchemaDialect.ORACLE: ScriptReference("schema/oracle/oracle-create-schema.sql", "/"),
    SchemaDialect.SQLSERVER: ScriptReference("schema/sqlserver/sqlserver-create-schema.sql", ";"),
    SchemaDialect.H2: ScriptReference("schema/h2/h2-create-schema.sql", ";"),
    SchemaDialect.SQLITE: ScriptReference("schema/sqlite/sqlite-create-schema.sql", ";"),
}

DROP_SCRIPTS: Dict[SchemaDialect, ScriptReference] = {
    SchemaDialect.POSTGRES: ScriptReference("schema/postgres/postgres-drop-schema.sql", ";"),
    SchemaDialect.MYSQL: ScriptReference("schema/mysql/mysql-drop-schema.sql", ";"),
    SchemaDialect.ORACLE: ScriptReference("schema/oracle/oracle-drop-schema.sql", "/"),
    SchemaDialect.SQLSERVER: ScriptReference("schema/sqlserver/sqlserver-drop-schema.sql", ";"),
    SchemaDialect.H2: ScriptReference("schema/h2/h2-drop-schema.sql", ";"),
    SchemaDialect.SQLITE: ScriptReference("schema/sqlite/sqlite-drop-schema.sql", ";"),
}

SCRIPTS: Dict[ScriptOperation, Dict[SchemaDialect, ScriptReference]] = {
    ScriptOperation.CREATE: CREATE_SCRIPTS,
    ScriptOperation.DROP: DROP_SCRIPTS,
}


def _check_exhaustive():
    missing = [
        f"{dialect.value}/{operation.value}"
        for operation in ScriptOperation
        for dialect in SchemaDialect
        if dialect not in SCRIPTS.get(operation, {})
    ]
    if missing:
        raise UnmappedScript(f"No schema script registered for: {', '.join(missing)}")


_check_exhaustive()


def script_for(dialect: SchemaDialect, operation: ScriptOperation) -> ScriptReference:
    """Return the bundled script reference for a dialect and operation"""
    try:
        return SCRIPTS[ScriptOperation(operation)][dialect]
    except (KeyError, ValueError):
        raise UnmappedScript(f"No schema script registered for {dialect!r}/{operation!r}") from None


def create_script_for(dialect: SchemaDialect) -> ScriptReference:
    return script_for(dialect, ScriptOperation.CREATE)


def drop_script_for(dialect: SchemaDialect) -> ScriptReference:
    return script_for(dialect, ScriptOperation.DROP)


def load_script(path: str) -> str:
    """Read the full text of a script bundled with the package"""
    logger.debug(f"Loading schema script: {path}")
    try:
        return resources.files(RESOURCE_PACKAGE).joinpath(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise ScriptNotFound(path) from None
