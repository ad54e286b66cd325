"""Run WellTrack database migrations.

Usage:
    python scripts/migrate.py                    upgrade to head
    python scripts/migrate.py create <message>   autogenerate a revision
    python scripts/migrate.py downgrade <rev>    downgrade to a revision
    python scripts/migrate.py current            show the applied revision
"""

import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def alembic_config() -> Config:
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    return cfg


def main(argv: list[str]) -> int:
    cfg = alembic_config()
    action = argv[0] if argv else "upgrade"

    try:
        if action == "upgrade":
            print("Running database migrations...")
            command.upgrade(cfg, "head")
        elif action == "create" and len(argv) > 1:
            message = " ".join(argv[1:])
            print(f"Creating migration: {message}")
            command.revision(cfg, message=message, autogenerate=True)
        elif action == "downgrade" and len(argv) == 2:
            print(f"Downgrading to {argv[1]}...")
            command.downgrade(cfg, argv[1])
        elif action == "current":
            command.current(cfg, verbose=True)
        else:
            print(__doc__, file=sys.stderr)
            return 2
    except Exception as e:
        print(f"✗ {action} failed: {e}", file=sys.stderr)
        return 1

    print(f"✓ {action} completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv[1:]))
