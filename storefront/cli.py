"""Console scripts declared in pyproject.toml.

  runserver [--host HOST] [--port PORT] [--reload | --no-reload]
  run-tests [pytest args...]
  init-env [--force]
  storefront-sweep-sessions
"""
from __future__ import annotations

import argparse
import shutil
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

from storefront.core.config import settings

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def build_server_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="runserver", description=f"Serve {settings.APP_NAME} with uvicorn")
    parser.add_argument("--host", default=settings.SERVER_HOST)
    parser.add_argument("--port", type=int, default=settings.SERVER_PORT)
    reload = parser.add_mutually_exclusive_group()
    reload.add_argument("--reload", dest="reload", action="store_true")
    reload.add_argument("--no-reload", dest="reload", action="store_false")
    # Auto-reload is a development convenience only
    parser.set_defaults(reload=not settings.is_production)
    return parser


def runserver(argv: Optional[List[str]] = None) -> None:
    import uvicorn

    options = build_server_parser().parse_args(argv)
    print(f"{settings.APP_NAME} ({settings.ENV}) on {options.host}:{options.port}, reload={options.reload}")
    uvicorn.run(
        "storefront.main:app",
        host=options.host,
        port=options.port,
        reload=options.reload,
        log_level=settings.LOG_LEVEL.lower(),
    )


def run_tests(argv: Optional[List[str]] = None) -> None:
    """Run the suite under this interpreter; exits with pytest's status."""
    args = sys.argv[1:] if argv is None else argv
    if not (PROJECT_ROOT / ".env.test").exists():
        print(f"Warning: {PROJECT_ROOT / '.env.test'} is missing, tests fall back to the process environment")
    raise SystemExit(subprocess.call([sys.executable, "-m", "pytest", *args], cwd=PROJECT_ROOT))


def init_env(argv: Optional[List[str]] = None, root: Path = PROJECT_ROOT) -> None:
    """Create `.env` from `.env.example`; `--force` overwrites an existing one."""
    parser = argparse.ArgumentParser(prog="init-env")
    parser.add_argument("--force", action="store_true")
    options = parser.parse_args(argv)

    template = root / ".env.example"
    target = root / ".env"
    if not template.exists():
        raise SystemExit(f"{template} not found")
    if target.exists() and not options.force:
        print(f"{target} already exists, pass --force to overwrite")
        return
    shutil.copyfile(template, target)
    print(f"Wrote {target}")


def sweep_sessions() -> None:
    """Delete expired sessions once, outside of Celery beat."""
    from storefront.core.database import Database
    from storefront.core.logger import setup_logging
    from storefront.services.session_service import SessionService

    setup_logging()
    database = Database.from_settings(settings)
    try:
        with database.session() as db:
            swept = SessionService.sweep_expired(db)
    finally:
        database.dispose()
    print(f"Removed {swept} expired session(s)")


COMMANDS = {
    "runserver": runserver,
    "run-tests": run_tests,
    "init-env": init_env,
    "sweep-sessions": lambda argv: sweep_sessions(),
}


if __name__ == "__main__":
    # python -m storefront.cli <command> [args...]
    if len(sys.argv) < 2 or sys.argv[1] not in COMMANDS:
        print(__doc__)
        raise SystemExit(0 if len(sys.argv) < 2 else 2)
    COMMANDS[sys.argv[1]](sys.argv[2:])
