import os

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "approval_portal_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

MAIL_SERVER = "localhost"
MAIL_PORT = 1025
MAIL_USER = ""
MAIL_PASS = ""
MAIL_USE_TLS = False

BASE_URL = "http://testserver"
APP_NAME = "PrestovaPOA"
