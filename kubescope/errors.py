"""Exception types raised outside the correlation core."""


class KubescopeError(Exception):
    """Base class for errors the CLI reports and exits on."""


class ConfigError(KubescopeError, ValueError):
    pass


class SnapshotError(KubescopeError):
    """A mandatory snapshot collection could not be obtained."""

    def __init__(self, collection: str, reason: str):
        self.collection = collection
        self.reason = reason
        super().__init__(f"{collection}: {reason}")


class SnapshotLoadError(SnapshotError):
    pass


class SnapshotFetchError(SnapshotError):
    pass
