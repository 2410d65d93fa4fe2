"""
Pre-flight check for a ledger deployment: both databases answer and the
ledger schema is migrated. Exits non-zero when anything is off.
"""

import sys

import structlog
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ntoken.config import settings
from ntoken.database.connection import engine, make_engine, missing_tables
from ntoken.utils.logging import setup_logging

logger = structlog.get_logger()


def check_environment() -> bool:
    ok = True
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        missing = missing_tables(engine)
    except SQLAlchemyError as e:
        logger.error("Ledger database unreachable", url=settings.DATABASE_URL, error=str(e))
        return False

    if missing:
        logger.error("Ledger schema incomplete, run `alembic upgrade head`", missing=missing)
        ok = False
    else:
        logger.info("Ledger schema present", url=settings.DATABASE_URL)

    if settings.CREDENTIAL_DATABASE_URL:
        credential_engine = make_engine(settings.CREDENTIAL_DATABASE_URL)
        try:
            if "balances" in missing_tables(credential_engine):
                logger.error("Credential ledger has no balances table")
                ok = False
        except SQLAlchemyError as e:
            logger.error("Credential ledger unreachable", error=str(e))
            ok = False
        finally:
            credential_engine.dispose()
    else:
        logger.warning("No credential ledger configured, creator credential checks will fail")

    return ok


if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL, json_logs=False)
    sys.exit(0 if check_environment() else 1)
