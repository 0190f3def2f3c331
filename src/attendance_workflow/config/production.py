import os

from .base import *  # noqa: F401,F403
from .base import env_flag, env_int

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": env_int("DB_PORT", 3306),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "attendance_workflow"),
    "connection_timeout": env_int("DB_TIMEOUT", 5),
}

DEBUG = False

AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "0")
