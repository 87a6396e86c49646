import asyncio
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Optional

from schema_testkit.execution.database import DatabaseRegistry
from schema_testkit.execution.executor import StatementExecutor
from schema_testkit.script.classes import ScriptOperation
from schema_testkit.script.dialects import dialect_for_engine
from schema_testkit.script.locator import load_script, script_for

log = logging.getLogger(__name__)


class SchemaProvisioner:
    """
    Creates and drops the bundled schema on configured test databases.

    ``create_if_not_exists``, ``drop_if_exists`` and ``apply_script`` must be
    called with an event loop running. They return an ``asyncio.Future``
    straight away; the connection and statement work happens on a thread
    pool reserved for blocking calls. The future resolves to ``None`` once
    every statement has been attempted, or fails with the resolution or
    connection error that stopped the run.

    Concurrent runs against the same database are not coordinated.
    """

    def __init__(self, registry: Optional[DatabaseRegistry] = None,
                 executor: Optional[StatementExecutor] = None,
                 max_workers: Optional[int] = None):
        self._owns_registry = registry is None
        self.registry = registry if registry is not None else DatabaseRegistry()
        self.executor = executor if executor is not None else StatementExecutor()
        self.blocking_pool = ThreadPoolExecutor(
            max_workers=max_workers or self.registry.settings.blocking_pool_size,
            thread_name_prefix="schema-blocking",
        )

    def create_if_not_exists(self, config_key: Optional[str] = None,
                             logger: Optional[logging.Logger] = None) -> "asyncio.Future[None]":
        return self._submit(self.apply_operation, ScriptOperation.CREATE, config_key, logger)

    def drop_if_exists(self, config_key: Optional[str] = None,
                       logger: Optional[logging.Logger] = None) -> "asyncio.Future[None]":
        return self._submit(self.apply_operation, ScriptOperation.DROP, config_key, logger)

    def apply_script(self, script: str, separator: str, config_key: Optional[str] = None,
                     logger: Optional[logging.Logger] = None) -> "asyncio.Future[None]":
        """Run an arbitrary script, split on ``separator``, against a configured database"""
        return self._submit(self.apply_script_blocking, script, separator, config_key, logger)

    def apply_operation(self, operation: ScriptOperation, config_key: Optional[str] = None,
                        logger: Optional[logging.Logger] = None) -> None:
        """Run the bundled create or drop script for the database's dialect. Blocking."""
        config_key = self._config_key(config_key)
        engine = self.registry.engine(config_key)
        dialect = dialect_for_engine(engine)
        reference = script_for(dialect, operation)
        script = load_script(reference.path)

        log.info(
            f"Applying {operation.value} schema for {dialect.name} on config key {config_key!r}"
        )
        self.executor.apply_script(engine, script, reference.separator, logger=logger)

    def apply_script_blocking(self, script: str, separator: str, config_key: Optional[str] = None,
                              logger: Optional[logging.Logger] = None) -> None:
        config_key = self._config_key(config_key)
        engine = self.registry.engine(config_key)
        self.executor.apply_script(engine, script, separator, logger=logger)

    def _config_key(self, config_key: Optional[str]) -> str:
        return config_key or self.registry.settings.default_config_key

    def _submit(self, func: Callable, *args) -> "asyncio.Future[None]":
        loop = asyncio.get_running_loop()
        return loop.run_in_executor(self.blocking_pool, func, *args)

    def close(self):
        """Stop the blocking pool, waiting for running scripts to finish"""
        self.blocking_pool.shutdown(wait=True)
        if self._owns_registry:
            self.registry.dispose()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()


_default_provisioner: Optional[SchemaProvisioner] = None
_default_lock = threading.Lock()


def default_provisioner() -> SchemaProvisioner:
    """Process-wide provisioner configured from the environment"""
    global _default_provisioner
    with _default_lock:
        if _default_provisioner is None:
            _default_provisioner = SchemaProvisioner()
        return _default_provisioner


def create_if_not_exists(config_key: Optional[str] = None,
                         logger: Optional[logging.Logger] = None) -> "asyncio.Future[None]":
    return default_provisioner().create_if_not_exists(config_key, logger)


def drop_if_exists(config_key: Optional[str] = None,
                   logger: Optional[logging.Logger] = None) -> "asyncio.Future[None]":
    return default_provisioner().drop_if_exists(config_key, logger)


def apply_script(script: str, separator: str, config_key: Optional[str] = None,
                 logger: Optional[logging.Logger] = None) -> "asyncio.Future[None]":
    return default_provisioner().apply_script(script, separator, config_key, logger)
