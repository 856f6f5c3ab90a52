import os


def get_settings_module() -> str:
    # APP_ENV selects the settings module; development is the default.
    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "hrms.config.production"

    if env in {"test", "testing"}:
        return "hrms.config.testing"

    return "hrms.config.development"


def env_flag(name: str, default: bool) -> bool:
    return bool(int(os.getenv(name, "1" if default else "0")))


def db_config_from_env(default_database: str) -> dict:
    return {
        "host": os.getenv("DB_HOST", "localhost"),
        "port": int(os.getenv("DB_PORT", "3306")),
        "user": os.getenv("DB_USER", "root"),
        "password": os.getenv("DB_PASSWORD", ""),
        "database": os.getenv("DB_NAME", default_database),
    }
