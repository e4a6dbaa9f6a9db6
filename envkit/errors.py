"""Exceptions raised for caller mistakes.

Soft failures (shape conflicts, unresolved deletes, skipped documents) are not
exceptions: they are logged and reported through return values.
"""


class EnvkitError(Exception):
    """Base exception for envkit."""


class InvalidPathError(EnvkitError, ValueError):
    """Raised when a key path string cannot be parsed."""

    def __init__(self, path, message: str):
        self.path = path
        super().__init__(f"Invalid key path {path!r}: {message}")


class UnknownModuleError(EnvkitError, KeyError):
    """Raised by ``Env.use`` for a name that was never registered."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f'Module "{self.name}" does not exist.'


class TaskNotFoundError(EnvkitError, KeyError):
    """Raised when running a task that was never defined."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(name)

    def __str__(self) -> str:
        return f'Task "{self.name}" not found.'
