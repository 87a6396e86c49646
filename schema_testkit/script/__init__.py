from .classes import SchemaDialect, ScriptOperation, ScriptReference
from .dialects import resolve_dialect, dialect_for_engine
from .locator import script_for, create_script_for, drop_script_for, load_script
from .splitter import split_statements

__all__ = [
    "SchemaDialect",
    "ScriptOperation",
    "ScriptReference",
    "resolve_dialect",
    "dialect_for_engine",
    "script_for",
    "create_script_for",
    "drop_script_for",
    "load_script",
    "split_statements",
]
