import os


def _flag(name: str, default: str = "0") -> bool:
    return bool(int(os.getenv(name, default)))


def _csv(name: str, default: str = "") -> list[str]:
    return [v.strip() for v in os.getenv(name, default).split(",") if v.strip()]


SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "team_tracker"),
}

DEBUG = False
AUTO_INIT_DB = _flag("AUTO_INIT_DB")

# Passkey-gated access modes
MANAGER_PASSKEY = os.getenv("MANAGER_PASSKEY", "")
PC_PASSKEY = os.getenv("PC_PASSKEY", "")
SESSION_DAYS = int(os.getenv("SESSION_DAYS", "30"))

# Email: smtp | brevo | disabled
EMAIL_BACKEND = os.getenv("EMAIL_BACKEND", "smtp").lower()
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "notifications@example.com")
EMAIL_SENDER_NAME = os.getenv("EMAIL_SENDER_NAME", "Team Tracker")
NOTIFICATION_CC = _csv("NOTIFICATION_CC")
SMTP_HOST = os.getenv("SMTP_HOST", "")
SMTP_PORT = int(os.getenv("SMTP_PORT", "587"))
SMTP_USER = os.getenv("SMTP_USER", "")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD", "")
SMTP_USE_TLS = _flag("SMTP_USE_TLS", "1")
BREVO_API_KEY = os.getenv("BREVO_API_KEY", "")
TRACKER_URL = os.getenv("TRACKER_URL", "http://localhost:5000/tracker")

# 0 = deliver notifications inline on the request thread
NOTIFICATION_WORKERS = int(os.getenv("NOTIFICATION_WORKERS", "2"))

HUBSTAFF_API_URL = os.getenv("HUBSTAFF_API_URL", "https://api.hubstaff.com/v2")
HUBSTAFF_TOKEN = os.getenv("HUBSTAFF_TOKEN", "")
HUBSTAFF_ORG_ID = os.getenv("HUBSTAFF_ORG_ID", "")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_DIR = os.getenv("LOG_DIR", "")
