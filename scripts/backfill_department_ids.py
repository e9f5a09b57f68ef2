from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.approval_portal.approval_portal.database.connection import DBConfig, DatabaseConnection
from src.approval_portal.approval_portal.forms.mysql_form_repository import MySQLFormRepository
from src.approval_portal.approval_portal.users.backfill import backfill_department_ids
from src.approval_portal.approval_portal.users.mysql_department_repository import MySQLDepartmentRepository
from src.approval_portal.approval_portal.users.mysql_user_repository import MySQLUserRepository


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(message)s")
    settings = importlib.import_module(get_settings_module())
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(dict(settings.DB_CONFIG)))

    result = backfill_department_ids(
        MySQLUserRepository(conn),
        MySQLDepartmentRepository(conn),
        MySQLFormRepository(conn),
    )
    print(f"OK: {result.users} user(s), {result.forms} form(s) updated")


if __name__ == "__main__":
    main()
