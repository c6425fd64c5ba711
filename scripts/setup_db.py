"""Create the schema and, with ``--seed``, load demo data.

    python scripts/setup_db.py            # schema only
    python scripts/setup_db.py --seed     # schema + seed.sql + demo accounts
    python scripts/setup_db.py --seed-only
"""

from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.daycare_system.daycare_system.database.bootstrap import (
    apply_schema,
    apply_seed_sql,
    describe_demo_accounts,
    ensure_demo_users,
    list_tables,
    missing_tables,
)


def _parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Set up the daycare database.")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--seed", action="store_true", help="also load seed.sql and the demo accounts")
    group.add_argument("--seed-only", action="store_true", help="skip schema.sql, only seed")
    return parser.parse_args(argv)


def main(argv=None) -> None:
    args = _parse_args(argv)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)
    target = (
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )

    if not args.seed_only:
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
        tables = list_tables(db_config)
        missing = missing_tables(tables)
        if missing:
            raise SystemExit(f"Schema applied to {target} but tables are missing: {', '.join(missing)}")
        print(f"OK: schema.sql -> {target} (tables={len(tables)})")

    if args.seed or args.seed_only:
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        accounts = ensure_demo_users(db_config)
        print(f"OK: seeded {target}. Demo accounts:")
        for line in describe_demo_accounts(accounts):
            print(f"  {line}")


if __name__ == "__main__":
    main()
