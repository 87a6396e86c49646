from dataclasses import dataclass
from enum import Enum


class SchemaDialect(Enum):
    """SQL variants that ship a bundled schema"""
    POSTGRES = "postgres"
    MYSQL = "mysql"
    ORACLE = "oracle"
    SQLSERVER = "sqlserver"
    H2 = "h2"
    SQLITE = "sqlite"


class ScriptOperation(str, Enum):
    """Operations with a bundled script per dialect"""
    CREATE = "create"
    DROP = "drop"


@dataclass(frozen=True)
class ScriptReference:
    """Location of a bundled script and the separator its statements use"""
    path: str
    separator: str

    def __repr__(self):
        return f"ScriptReference({self.path}, separator={self.separator!r})"
