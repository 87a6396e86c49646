from celery import Celery, Task
from celery.utils.log import get_task_logger

from typing import Dict, Optional
import logging

from schema_testkit.provisioner import SchemaProvisioner
from schema_testkit.script.classes import ScriptOperation
from schema_testkit.settings import load_settings

logging.basicConfig(level=logging.INFO)

settings = load_settings()

app = Celery(__name__)
app.conf.broker_url = settings.broker_url
app.conf.result_backend = settings.broker_url
app.conf.task_track_started = True

# schema setup and teardown stay off the general purpose queues
app.conf.task_routes = {
    'create_schema': {'queue': 'schema'},
    'drop_schema': {'queue': 'schema'},
    'apply_schema_script': {'queue': 'schema'},
}

app.conf.task_serializer = 'json'
app.conf.result_serializer = 'json'
app.conf.accept_content = ['json']
app.conf.timezone = 'UTC'
app.conf.enable_utc = True

logger = get_task_logger(__name__)

_provisioner: Optional[SchemaProvisioner] = None


def get_provisioner() -> SchemaProvisioner:
    """Provisioner shared by the tasks of this worker process"""
    global _provisioner
    if _provisioner is None:
        # tasks call the blocking methods directly; the pool only backs the async API
        _provisioner = SchemaProvisioner(max_workers=1)
    return _provisioner


def _done(config_key: Optional[str], operation: str) -> Dict:
    return {
        'config_key': config_key or get_provisioner().registry.settings.default_config_key,
        'operation': operation,
        'status': 'done',
    }


@app.task(bind=True, name='create_schema')
def create_schema(self: Task, config_key: Optional[str] = None) -> Dict:
    """Create the bundled schema on the database behind ``config_key``"""
    logger.info(f"Creating schema for config key: {config_key}")
    get_provisioner().apply_operation(ScriptOperation.CREATE, config_key, logger=logger)
    return _done(config_key, ScriptOperation.CREATE.value)


@app.task(bind=True, name='drop_schema')
def drop_schema(self: Task, config_key: Optional[str] = None) -> Dict:
    """Drop the bundled schema from the database behind ``config_key``"""
    logger.info(f"Dropping schema for config key: {config_key}")
    get_provisioner().apply_operation(ScriptOperation.DROP, config_key, logger=logger)
    return _done(config_key, ScriptOperation.DROP.value)


@app.task(bind=True, name='apply_schema_script')
def apply_schema_script(self: Task, script: str, separator: str, config_key: Optional[str] = None) -> Dict:
    logger.info(f"Applying script ({len(script)} chars, separator {separator!r}) for config key: {config_key}")
    get_provisioner().apply_script_blocking(script, separator, config_key, logger=logger)
    return _done(config_key, 'apply')
