"""The ``Env`` facade: one accessor for the store, the collections and tasks."""
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from .config import Config
from .errors import UnknownModuleError
from .storage.collection import DB_KEY, Database
from .storage.path_store import PathStore, PathStoreView
from .tasks import TaskRunner

logger = logging.getLogger(__name__)


class Env:
    """Owns one snapshot-backed store and everything layered on it.

    >>> with Env("state.json") as env:
    ...     env.state.set("settings.theme", "dark")
    ...     users = env.db.collection("users")
    """

    def __init__(self, store_path: Optional[Path] = None):
        self._path_store = PathStore(Path(store_path or Config.STORE_PATH))
        self.store = PathStoreView(self._path_store, reserved=(DB_KEY,))
        self.db = Database(self._path_store)
        self.tasks = TaskRunner()
        self._closed = False

        self._modules: Dict[str, Any] = {}
        self.register("store", self.store)
        self.register("state", self.store)
        self.register("db", self.db)
        self.register("tasks", self.tasks)

    @property
    def state(self) -> PathStoreView:
        return self.store

    @property
    def store_path(self) -> Path:
        return self._path_store.snapshot_path

    def use(self, name: str) -> Any:
        try:
            return self._modules[name]
        except KeyError:
            raise UnknownModuleError(name) from None

    def available_modules(self) -> List[str]:
        return list(self._modules)

    def register(self, name: str, module: Any, *, replace: bool = False):
        if not isinstance(name, str) or not name:
            raise TypeError("module name must be a non-empty str")
        if name in self._modules and not replace:
            raise ValueError(f'Module "{name}" is already registered')
        self._modules[name] = module

    def task(self, name: str, fn: Optional[Callable] = None):
        """Define a task, directly or as a decorator."""
        if fn is not None:
            return self.tasks.define(name, fn)

        def decorator(f):
            return self.tasks.define(name, f)

        return decorator

    def save(self) -> bool:
        """Rewrite the snapshot now. Mutations already do this on their own."""
        return self._path_store.save()

    def close(self):
        if self._closed:
            return
        self._closed = True
        if not self.save():
            logger.warning("Final snapshot write to %s failed", self.store_path)

    def __enter__(self) -> "Env":
        return self

    def __exit__(self, *exc):
        self.close()
