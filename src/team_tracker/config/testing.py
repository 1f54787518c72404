from .base import *  # noqa: F401,F403

SECRET_KEY = "test-secret"

DEBUG = False
TESTING = True
AUTO_INIT_DB = False

MANAGER_PASSKEY = "manager-pass"
PC_PASSKEY = "pc-pass"
EMAIL_BACKEND = "disabled"
NOTIFICATION_WORKERS = 0
HUBSTAFF_TOKEN = ""
LOG_DIR = ""
