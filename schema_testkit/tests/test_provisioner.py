import asyncio
import logging
import os
import tempfile
import threading
import unittest
from unittest.mock import Mock, patch

from sqlalchemy import inspect, text

from schema_testkit import provisioner as provisioner_module
from schema_testkit.errors import DatabaseNotConfigured, ScriptNotFound, UnsupportedDialect
from schema_testkit.execution.database import DatabaseRegistry
from schema_testkit.provisioner import SchemaProvisioner
from schema_testkit.script.classes import SchemaDialect, ScriptOperation
from schema_testkit.script.locator import load_script, script_for
from schema_testkit.settings import SchemaSettings

SCHEMA_TABLES = {"event_journal", "event_tag", "snapshot", "durable_state"}


def table_names(engine):
    return set(inspect(engine).get_table_names()) - {"sqlite_sequence"}


class TestSchemaProvisionerSqlite(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        """Set up a file backed SQLite database per test"""
        self.tmp = tempfile.TemporaryDirectory()
        self.registry = DatabaseRegistry(SchemaSettings())
        self.registry.register("journal", f"sqlite:///{os.path.join(self.tmp.name, 'journal.db')}")
        self.provisioner = SchemaProvisioner(registry=self.registry, max_workers=2)

    def tearDown(self):
        self.provisioner.close()
        self.registry.dispose()
        self.tmp.cleanup()

    async def test_create_then_drop_leaves_no_schema(self):
        engine = self.registry.engine("journal")

        await self.provisioner.create_if_not_exists("journal")
        self.assertEqual(table_names(engine), SCHEMA_TABLES)

        await self.provisioner.drop_if_exists("journal")
        self.assertEqual(table_names(engine), set())

    async def test_create_is_repeatable(self):
        await self.provisioner.create_if_not_exists("journal")
        await self.provisioner.create_if_not_exists("journal")

        self.assertEqual(table_names(self.registry.engine("journal")), SCHEMA_TABLES)

    async def test_drop_on_empty_database_succeeds(self):
        await self.provisioner.drop_if_exists("journal")

        self.assertEqual(table_names(self.registry.engine("journal")), set())

    async def test_default_config_key_is_used(self):
        await self.provisioner.create_if_not_exists()

        self.assertEqual(table_names(self.registry.engine("journal")), SCHEMA_TABLES)

    async def test_apply_script_with_invalid_statement_completes(self):
        result = await self.provisioner.apply_script(
            "CREATE TABL oops (id INTEGER);\nCREATE TABLE fixtures (id INTEGER);",
            ";",
            "journal"
        )

        self.assertIsNone(result)
        self.assertEqual(table_names(self.registry.engine("journal")), {"fixtures"})

    async def test_apply_script_slash_separator_keeps_block_whole(self):
        script = (
            "CREATE TABLE audit (id INTEGER, note TEXT)\n/\n"
            "CREATE TRIGGER audit_note AFTER INSERT ON audit\n"
            "BEGIN\n  UPDATE audit SET note = 'seen' WHERE id = new.id;\nEND\n/\n"
            "INSERT INTO audit (id) VALUES (1)\n/\n"
        )

        await self.provisioner.apply_script(script, "/", "journal")

        with self.registry.engine("journal").connect() as conn:
            note = conn.execute(text("SELECT note FROM audit WHERE id = 1")).scalar_one()
        self.assertEqual(note, "seen")

    async def test_returns_pending_future(self):
        future = self.provisioner.create_if_not_exists("journal")

        self.assertIsInstance(future, asyncio.Future)
        await future
        self.assertTrue(future.done())

    async def test_missing_config_key_fails_the_future(self):
        with self.assertRaises(DatabaseNotConfigured):
            await self.provisioner.create_if_not_exists("snapshot")
        with self.assertRaises(DatabaseNotConfigured):
            await self.provisioner.apply_script("SELECT 1", ";", "snapshot")

    async def test_custom_logger_receives_statements(self):
        custom = logging.getLogger("schema_testkit.tests.provisioner")

        with self.assertLogs(custom, level=logging.DEBUG) as logs:
            await self.provisioner.drop_if_exists("journal", logger=custom)

        self.assertIn("applying DDL: DROP TABLE IF EXISTS event_tag", [r.getMessage() for r in logs.records])


class TestSchemaProvisionerResolution(unittest.IsolatedAsyncioTestCase):

    def setUp(self):
        self.engine = Mock()
        self.engine.dialect.name = "postgresql"
        self.registry = Mock()
        self.registry.settings = SchemaSettings()
        self.registry.engine.return_value = self.engine
        self.executor = Mock()
        self.provisioner = SchemaProvisioner(registry=self.registry, executor=self.executor, max_workers=1)

    def tearDown(self):
        self.provisioner.close()

    async def test_create_uses_dialect_script_and_separator(self):
        await self.provisioner.create_if_not_exists("journal")

        reference = script_for(SchemaDialect.POSTGRES, ScriptOperation.CREATE)
        self.registry.engine.assert_called_once_with("journal")
        self.executor.apply_script.assert_called_once_with(
            self.engine, load_script(reference.path), ";", logger=None
        )

    async def test_drop_on_oracle_uses_slash(self):
        self.engine.dialect.name = "oracle"
        custom = logging.getLogger("schema_testkit.tests.oracle")

        await self.provisioner.drop_if_exists("journal", logger=custom)

        reference = script_for(SchemaDialect.ORACLE, ScriptOperation.DROP)
        self.executor.apply_script.assert_called_once_with(
            self.engine, load_script(reference.path), "/", logger=custom
        )

    async def test_apply_script_passes_explicit_separator(self):
        await self.provisioner.apply_script("BEGIN NULL; END;", "/", "read-side")

        self.registry.engine.assert_called_once_with("read-side")
        self.executor.apply_script.assert_called_once_with(
            self.engine, "BEGIN NULL; END;", "/", logger=None
        )

    async def test_unsupported_dialect_fails_before_any_statement(self):
        self.engine.dialect.name = "db2"

        with self.assertRaises(UnsupportedDialect):
            await self.provisioner.create_if_not_exists("journal")

        self.executor.apply_script.assert_not_called()

    async def test_missing_script_fails_before_any_statement(self):
        with patch.object(provisioner_module, "load_script", side_effect=ScriptNotFound("x.sql")):
            with self.assertRaises(ScriptNotFound):
                await self.provisioner.drop_if_exists("journal")

        self.executor.apply_script.assert_not_called()

    async def test_work_runs_on_blocking_pool(self):
        threads = []
        self.executor.apply_script.side_effect = lambda *args, **kwargs: threads.append(
            threading.current_thread().name
        )

        await self.provisioner.create_if_not_exists("journal")

        self.assertEqual(len(threads), 1)
        self.assertTrue(threads[0].startswith("schema-blocking"))
        self.assertNotEqual(threads[0], threading.main_thread().name)

    async def test_executor_error_fails_the_future(self):
        self.executor.apply_script.side_effect = RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            await self.provisioner.create_if_not_exists("journal")


class TestModuleLevelOperations(unittest.IsolatedAsyncioTestCase):

    async def test_delegates_to_default_provisioner(self):
        default = Mock()
        with patch.object(provisioner_module, "default_provisioner", return_value=default):
            provisioner_module.create_if_not_exists("journal")
            provisioner_module.drop_if_exists("journal")
            provisioner_module.apply_script("SELECT 1", ";", "journal")

        default.create_if_not_exists.assert_called_once_with("journal", None)
        default.drop_if_exists.assert_called_once_with("journal", None)
        default.apply_script.assert_called_once_with("SELECT 1", ";", "journal", None)


class TestProvisionerWithoutLoop(unittest.TestCase):

    def test_calling_without_event_loop_raises(self):
        registry = Mock()
        registry.settings = SchemaSettings()
        with SchemaProvisioner(registry=registry, executor=Mock(), max_workers=1) as provisioner:
            with self.assertRaises(RuntimeError):
                provisioner.create_if_not_exists("journal")


if __name__ == '__main__':
    unittest.main()
