# envkit/extensions.py
import atexit
import weakref

from flask import current_app
from flask_cors import CORS

from .env import Env

# CORS is a real Flask extension (keeps init_app)
cors = CORS()

EXTENSION_KEY = "envkit"

# weak, so apps that are gone are not kept alive just to be flushed at exit
_open_envs = weakref.WeakSet()


@atexit.register
def _close_open_envs():
    for env in list(_open_envs):
        env.close()


def init_env(app) -> Env:
    """Build the app's Env on STORE_PATH. Outside testing it is flushed at exit."""
    env = Env(app.config["STORE_PATH"])
    env.task("snapshot", env.save)
    env.task("collections", env.db.collection_names)
    app.extensions[EXTENSION_KEY] = env
    if not app.testing:
        _open_envs.add(env)
    return env


def get_env() -> Env:
    return current_app.extensions[EXTENSION_KEY]
