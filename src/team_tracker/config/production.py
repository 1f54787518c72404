import os

from .base import *  # noqa: F401,F403

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DEBUG = False
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
LOG_DIR = os.getenv("LOG_DIR", "logs")
