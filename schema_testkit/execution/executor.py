import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.engine import Connection, Engine
from sqlalchemy.exc import DBAPIError

from schema_testkit.errors import ConnectionAcquisitionError
from schema_testkit.script.splitter import split_statements


@dataclass(frozen=True)
class StatementResult:
    """Outcome of one attempted statement"""
    statement: str
    error: Optional[DBAPIError] = None

    @property
    def succeeded(self) -> bool:
        return self.error is None


class StatementExecutor:
    """
    Runs DDL statements in order on a single connection.

    Every database error raised by a statement is logged at DEBUG and the
    next statement runs anyway, so "already exists" on create and "does not
    exist" on drop never stop a script. Errors are masked regardless of
    their cause (a missing privilege looks the same as an existing table),
    which suits throwaway test databases and makes this unsuitable for
    production schema changes.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def apply_script(self, engine: Engine, script: str, separator: str,
                     logger: Optional[logging.Logger] = None) -> None:
        """Split a raw script and execute its statements. Blocking."""
        self.execute(engine, split_statements(script, separator), logger=logger)

    def execute(self, engine: Engine, statements: Iterable[str],
                logger: Optional[logging.Logger] = None) -> None:
        """Attempt every statement; returns once all have been tried. Blocking."""
        log = logger or self.logger
        statements = list(statements)

        connection = self._connect(engine)
        try:
            results = [self._run_statement(connection, statement, log) for statement in statements]
        finally:
            connection.close()

        failed = sum(1 for result in results if not result.succeeded)
        log.debug(f"Applied script: {len(results)} statement(s) attempted, {failed} failed")

    @staticmethod
    def _connect(engine: Engine) -> Connection:
        try:
            connection = engine.connect()
        except DBAPIError as e:
            raise ConnectionAcquisitionError(f"Could not connect to {engine.url!r}: {e}") from e

        # each statement commits on its own and goes to the driver as raw text,
        # so a literal "%" is never read as a parameter placeholder
        try:
            return connection.execution_options(isolation_level="AUTOCOMMIT", no_parameters=True)
        except BaseException:
            connection.close()
            raise

    @staticmethod
    def _run_statement(connection: Connection, statement: str, log: logging.Logger) -> StatementResult:
        log.debug(f"applying DDL: {statement}")
        try:
            connection.exec_driver_sql(statement)
        except DBAPIError as e:
            log.debug("Exception while applying SQL script", exc_info=True)
            return StatementResult(statement, e)
        return StatementResult(statement)
