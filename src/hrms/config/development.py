import os

from . import db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")
DB_CONFIG = db_config_from_env("hrms_db")
DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Applies database/schema.sql on startup.
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", True)
SCHEDULER_ENABLED = env_flag("SCHEDULER_ENABLED", True)
