"""
Bring the database schema up to date.

Usage: python -m resume_analyzer.scripts.run_migrations [--database-url URL]

Runs `alembic upgrade head` against the configured DATABASE_URL (or the one
given) and reports the trial-tracking and storage columns afterwards. Safe to
run repeatedly.
"""
import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

from resume_analyzer.app.core.config import settings
from resume_analyzer.app.core.logging_config import get_logger, setup_logging

logger = get_logger("scripts.run_migrations")

ALEMBIC_DIR = Path(__file__).resolve().parent.parent / "alembic"
TRIAL_COLUMNS = ("trial_uses", "max_trial_uses", "trial_expires_at")


def build_alembic_config(database_url: str) -> Config:
    cfg = Config()
    cfg.set_main_option("script_location", str(ALEMBIC_DIR))
    # configparser interpolation: escape % in passwords
    cfg.set_main_option("sqlalchemy.url", database_url.replace("%", "%%"))
    return cfg


def verify_schema(database_url: str) -> dict:
    """Column report for users/resumes. Raises RuntimeError when expected columns are missing."""
    engine = create_engine(database_url)
    try:
        inspector = inspect(engine)
        user_columns = {c["name"]: c for c in inspector.get_columns("users")}
        resume_columns = {c["name"] for c in inspector.get_columns("resumes")}
    finally:
        engine.dispose()

    missing = [c for c in TRIAL_COLUMNS if c not in user_columns]
    if "storage_url" not in resume_columns:
        missing.append("resumes.storage_url")
    if missing:
        raise RuntimeError(f"Schema verification failed, missing columns: {', '.join(missing)}")

    return {
        name: {"type": str(user_columns[name]["type"]), "default": user_columns[name].get("default")}
        for name in TRIAL_COLUMNS
    }


def run_migrations(database_url: str | None = None) -> dict:
    url = database_url or settings.database_url
    logger.info("Running migrations target=%s", ALEMBIC_DIR)
    command.upgrade(build_alembic_config(url), "head")
    report = verify_schema(url)
    logger.info("Migrations complete")
    return report


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Apply database migrations")
    parser.add_argument("--database-url", default=None, help="Override DATABASE_URL")
    args = parser.parse_args(argv)

    setup_logging()
    try:
        report = run_migrations(args.database_url)
    except Exception as e:
        logger.error("Migration failed: %s", e)
        return 1

    print("Trial tracking columns:")
    for name, info in report.items():
        print(f"  {name}: {info['type']} (default: {info['default']})")
    print("resumes.storage_url: present")
    return 0


if __name__ == "__main__":
    sys.exit(main())
