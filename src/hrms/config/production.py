import os

from . import db_config_from_env, env_flag

SECRET_KEY = os.environ["SECRET_KEY"]
DB_CONFIG = db_config_from_env("hrms_db")
DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", False)

# Run the scheduler in exactly one process per deployment.
SCHEDULER_ENABLED = env_flag("SCHEDULER_ENABLED", True)
