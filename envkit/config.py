import os
from pathlib import Path
from dotenv import load_dotenv

load_dotenv()


class Config:
    # relative paths resolve against the process working directory
    STORE_PATH = Path(os.getenv("ENVKIT_STORE_PATH", "envkit_store.json"))
    LOG_LEVEL = os.getenv("ENVKIT_LOG_LEVEL", "INFO").upper()


class DevConfig(Config):
    DEBUG = True
    LOG_LEVEL = os.getenv("ENVKIT_LOG_LEVEL", "DEBUG").upper()


class ProdConfig(Config):
    DEBUG = False
