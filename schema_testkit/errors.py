class SchemaTestkitError(Exception):
    """Base class for errors raised while provisioning a test schema"""


class UnsupportedDialect(SchemaTestkitError):
    """The connection profile does not match any known schema dialect"""

    def __init__(self, profile: str):
        self.profile = profile
        super().__init__(f"No schema dialect for connection profile: {profile!r}")


class UnmappedScript(SchemaTestkitError, LookupError):
    """No bundled script is registered for a dialect/operation pair"""


class ScriptNotFound(SchemaTestkitError, FileNotFoundError):
    """A bundled script resource could not be read"""

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Schema script not found: {path}")


class DatabaseNotConfigured(SchemaTestkitError, KeyError):
    """No database is configured under the requested key"""

    def __init__(self, config_key: str):
        self.config_key = config_key
        super().__init__(config_key)

    def __str__(self):
        return f"No database configured for key: {self.config_key!r}"


class ConnectionAcquisitionError(SchemaTestkitError):
    """Creating an engine or opening a connection failed"""
