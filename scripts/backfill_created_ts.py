from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.approval_portal.approval_portal.database.bootstrap import ensure_column
from src.approval_portal.approval_portal.database.connection import DBConfig, DatabaseConnection
from src.approval_portal.approval_portal.forms.mysql_form_repository import MySQLFormRepository
from src.approval_portal.approval_portal.users.backfill import backfill_created_timestamps


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    ensure_column(db_config, table="forms", column="created_ts", definition="DATETIME(3) NULL AFTER created_at")
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    result = backfill_created_timestamps(MySQLFormRepository(conn))
    print(f"OK: {result.forms} form(s) updated")


if __name__ == "__main__":
    main()
