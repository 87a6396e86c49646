"""Provision and tear down a persistence schema for automated tests."""

from .errors import (
    SchemaTestkitError,
    UnsupportedDialect,
    UnmappedScript,
    ScriptNotFound,
    DatabaseNotConfigured,
    ConnectionAcquisitionError,
)
from .execution import DatabaseRegistry, StatementExecutor
from .provisioner import (
    SchemaProvisioner,
    create_if_not_exists,
    drop_if_exists,
    apply_script,
)
from .script import SchemaDialect, ScriptOperation, ScriptReference, resolve_dialect, split_statements
from .settings import DatabaseSettings, SchemaSettings, load_settings

__all__ = [
    "SchemaTestkitError",
    "UnsupportedDialect",
    "UnmappedScript",
    "ScriptNotFound",
    "DatabaseNotConfigured",
    "ConnectionAcquisitionError",
    "DatabaseRegistry",
    "StatementExecutor",
    "SchemaProvisioner",
    "create_if_not_exists",
    "drop_if_exists",
    "apply_script",
    "SchemaDialect",
    "ScriptOperation",
    "ScriptReference",
    "resolve_dialect",
    "split_statements",
    "DatabaseSettings",
    "SchemaSettings",
    "load_settings",
]
