"""
Run Alembic against the bundled migrations without an alembic.ini.

    python -m pointart_api.db.run_migrations upgrade head
    python -m pointart_api.db.run_migrations downgrade -1
    python -m pointart_api.db.run_migrations current
"""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import List, Optional

from alembic import command
from alembic.config import Config

from pointart_api.db.config import get_database_settings

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def alembic_config() -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    cfg.set_main_option("sqlalchemy.url", get_database_settings().offline_url)
    return cfg


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="run_migrations", description="Point Art Hub schema migrations")
    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("upgrade").add_argument("revision", nargs="?", default="head")
    sub.add_parser("downgrade").add_argument("revision", nargs="?", default="-1")
    sub.add_parser("history")
    sub.add_parser("current")
    sub.add_parser("heads")
    sub.add_parser("show").add_argument("revision")
    return parser


# PUBLIC_INTERFACE
def main(argv: Optional[List[str]] = None) -> None:
    """Dispatch one Alembic command; `main(["upgrade", "head"])` is what startup runs."""
    args = _parser().parse_args(argv)
    cfg = alembic_config()
    if args.command in ("upgrade", "downgrade", "show"):
        getattr(command, args.command)(cfg, args.revision)
    else:
        getattr(command, args.command)(cfg)


if __name__ == "__main__":
    main()
