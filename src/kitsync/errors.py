"""Exception types raised by kitsync operations."""


class KitsyncError(Exception):
    """Base class for kitsync errors that should surface as clean CLI messages."""


class UnsupportedTargetError(KitsyncError):
    """Raised when a provider has no install location for an artifact type or scope."""

    def __init__(self, provider: str, artifact_type: str, *, global_scope: bool) -> None:
        scope = "global" if global_scope else "project"
        super().__init__(f"Provider '{provider}' does not support {scope}-level {artifact_type}s")
        self.provider = provider
        self.artifact_type = artifact_type
        self.global_scope = global_scope


class UnsafePathError(KitsyncError):
    """Raised when a path would escape its installation root."""

    def __init__(self, path: str, root: str) -> None:
        super().__init__(f"Unsafe path: {path} escapes {root}")
        self.path = path
        self.root = root


class TransientIOError(KitsyncError):
    """Raised when a transient I/O error persists after every retry attempt."""

    def __init__(self, path: str, attempts: int, cause: OSError) -> None:
        super().__init__(f"{path}: {cause.strerror or cause} (gave up after {attempts} attempts)")
        self.path = path
        self.attempts = attempts
        self.cause = cause
