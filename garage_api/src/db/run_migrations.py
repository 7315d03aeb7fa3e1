"""
Programmatic Alembic migration runner.

Runs migrations without an alembic.ini by pointing the script location at
this package's migrations directory.

Usage examples:
    python -m src.db.run_migrations upgrade head
    python -m src.db.run_migrations downgrade -1
    python -m src.db.run_migrations current
"""

import logging
import sys
from pathlib import Path
from typing import Callable, Dict, List

from alembic import command
from alembic.config import Config

from src.db.config import get_settings

logger = logging.getLogger(__name__)

MIGRATIONS_DIR = Path(__file__).resolve().parent / "migrations"

_COMMANDS: Dict[str, Callable[..., object]] = {
    "upgrade": command.upgrade,
    "downgrade": command.downgrade,
    "history": command.history,
    "current": command.current,
    "heads": command.heads,
    "show": command.show,
}
_DEFAULT_ARGS: Dict[str, List[str]] = {"upgrade": ["head"], "downgrade": ["-1"]}


# PUBLIC_INTERFACE
def build_config() -> Config:
    """Return an Alembic Config bound to the bundled migrations and configured DB."""
    cfg = Config()
    cfg.set_main_option("script_location", str(MIGRATIONS_DIR))
    # env.py switches to the async URL for online runs.
    cfg.set_main_option("sqlalchemy.url", get_settings().sync_database_url)
    return cfg


# PUBLIC_INTERFACE
def main(argv: List[str] | None = None) -> None:
    """Run an Alembic command with programmatic configuration."""
    args = list(sys.argv[1:] if argv is None else argv)
    if not args:
        print("No Alembic arguments provided. Example: upgrade head")
        sys.exit(1)

    cmd, other = args[0], args[1:]
    func = _COMMANDS.get(cmd)
    if func is None:
        print(f"Unsupported Alembic command: {cmd}")
        sys.exit(2)
    if cmd == "show" and not other:
        print("Usage: show <revision>")
        sys.exit(2)

    logger.info("alembic %s %s", cmd, " ".join(other))
    func(build_config(), *(other or _DEFAULT_ARGS.get(cmd, [])))


if __name__ == "__main__":
    main()
