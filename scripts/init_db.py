from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv

from stallsync.config import get_settings_module
from stallsync.database.bootstrap import apply_schema, list_tables
from stallsync.database.connection import DBConfig, DatabaseConnection


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO)
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection(DBConfig.from_mapping(dict(settings.DB_CONFIG)))

    statements = apply_schema(conn)
    tables = list_tables(conn)
    cfg = conn.config
    print(
        f"OK: applied {statements} statement(s) -> {cfg.user}@{cfg.host}:{cfg.port}/{cfg.database} "
        f"(tables={len(tables)})"
    )


if __name__ == "__main__":
    main()
