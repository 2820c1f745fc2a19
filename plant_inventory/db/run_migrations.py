"""
Programmatic Alembic migration runner.

Runs migrations without an alembic.ini by pointing Alembic at the migrations
package next to this file.

Usage examples:
    python -m plant_inventory.db.run_migrations upgrade head
    python -m plant_inventory.db.run_migrations downgrade -1
    python -m plant_inventory.db.run_migrations current
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List

from alembic import command
from alembic.config import Config

from plant_inventory.db.config import get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"


def _upgrade(cfg: Config, args: List[str]) -> None:
    command.upgrade(cfg, args[0] if args else "head")


def _downgrade(cfg: Config, args: List[str]) -> None:
    command.downgrade(cfg, args[0] if args else "-1")


def _history(cfg: Config, args: List[str]) -> None:
    command.history(cfg, verbose="-v" in args)


def _current(cfg: Config, args: List[str]) -> None:
    command.current(cfg, verbose="-v" in args)


def _heads(cfg: Config, args: List[str]) -> None:
    command.heads(cfg)


def _revision(cfg: Config, args: List[str]) -> None:
    message = " ".join(a for a in args if a != "--autogenerate") or None
    command.revision(cfg, message=message, autogenerate="--autogenerate" in args)


COMMANDS: Dict[str, Callable[[Config, List[str]], None]] = {
    "upgrade": _upgrade,
    "downgrade": _downgrade,
    "history": _history,
    "current": _current,
    "heads": _heads,
    "revision": _revision,
}


# PUBLIC_INTERFACE
def build_config() -> Config:
    """Alembic config bound to the bundled migrations and the configured database."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # Used by offline mode; env.py builds its own async engine when online.
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """
    Run an Alembic command, e.g. main(["upgrade", "head"]).

    Raises:
        SystemExit: no command or an unsupported command was given.
    """
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        raise SystemExit(f"Usage: run_migrations <{'|'.join(COMMANDS)}> [args]")

    name, rest = args[0], args[1:]
    handler = COMMANDS.get(name)
    if handler is None:
        raise SystemExit(f"Unsupported Alembic command: {name}")

    logger.info("Running alembic %s %s", name, " ".join(rest))
    handler(build_config(), rest)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
