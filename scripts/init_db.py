from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from hrms.config import get_settings_module
from hrms.database.bootstrap import apply_schema, list_tables
from hrms.main import SCHEMA_PATH

logger = logging.getLogger("init_db")


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")

    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    statements = apply_schema(db_config, schema_path=SCHEMA_PATH)
    tables = list_tables(db_config)
    logger.info(
        "OK: %s statements -> %s@%s:%s/%s (tables=%s)",
        statements,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        len(tables),
    )


if __name__ == "__main__":
    main()
