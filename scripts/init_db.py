from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
for entry in (REPO_ROOT, REPO_ROOT / "src" / "timeclock"):
    if str(entry) not in sys.path:
        sys.path.insert(0, str(entry))

from dotenv import load_dotenv

from config import get_settings_module

from timeclock.common.log_config import configure_logging
from timeclock.database.bootstrap import apply_schema, ensure_default_policy, list_tables
from timeclock.database.connection import DBConfig


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql to the configured MySQL database.")
    parser.add_argument("--no-policy", action="store_true", help="do not insert the default attendance policy")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
    seeded = False if args.no_policy else ensure_default_policy(db_config)
    tables = list_tables(db_config)
    print(
        f"OK: Applied schema.sql -> {DBConfig.from_dict(db_config).describe()} "
        f"(tables={len(tables)}, default policy {'inserted' if seeded else 'kept'})"
    )


if __name__ == "__main__":
    main()
