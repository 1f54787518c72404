from __future__ import annotations

import importlib
import os
from pathlib import Path

from dotenv import load_dotenv

from team_tracker.config import get_settings_module
from team_tracker.database.bootstrap import apply_schema, ensure_admin_user, list_tables


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    schema_path = Path(__file__).resolve().parents[1] / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    tables = list_tables(db_config)
    print(
        "OK: Applied schema.sql -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')} "
        f"(tables={len(tables)})"
    )

    username = os.getenv("ADMIN_USERNAME", "").strip()
    password = os.getenv("ADMIN_PASSWORD", "")
    if username and password:
        ensure_admin_user(db_config, username=username, password=password, full_name=os.getenv("ADMIN_FULL_NAME", "Administrator"))
        print(f"OK: super_admin account '{username}' is present")


if __name__ == "__main__":
    main()
