from .database import DatabaseRegistry
from .executor import StatementExecutor, StatementResult

__all__ = ["DatabaseRegistry", "StatementExecutor", "StatementResult"]
