"""
Main entry point for the NToken ledger.
"""

import json
from pathlib import Path
from typing import List, Optional

import structlog
from sqlalchemy.orm import Session, sessionmaker

from .config import settings
from .contracts import StaticAccountDirectory
from .database.connection import get_db, init_db, make_engine
from .services.actions import ActionBatch
from .services.authorization import CredentialSource, LedgerCredentialSource
from .services.capabilities import get_ledger_profile
from .services.processor import ActionProcessor
from .utils.exceptions import ProcessingResult
from .utils.logging import setup_logging


def open_credential_source() -> Optional[LedgerCredentialSource]:
    if not settings.CREDENTIAL_DATABASE_URL:
        return None
    credential_engine = make_engine(settings.CREDENTIAL_DATABASE_URL)
    credential_session: Session = sessionmaker(bind=credential_engine)()
    return LedgerCredentialSource(credential_session, settings.CREDENTIAL_SYMBOL_ID)


def run_batch(batch: ActionBatch, db_session: Session, credentials: Optional[CredentialSource] = None) -> List[ProcessingResult]:
    processor = ActionProcessor(
        db_session,
        credentials=credentials,
        profile=get_ledger_profile(settings.LEDGER_PROFILE),
    )
    return processor.process_batch(batch.actions, StaticAccountDirectory(batch.accounts))


def main(batch_path: str, debug: bool = False, create_schema: bool = False) -> List[ProcessingResult]:
    """Main application entry point"""
    setup_logging("DEBUG" if debug else settings.LOG_LEVEL, json_logs=not debug)
    logger = structlog.get_logger()
    logger.info("Starting NToken ledger", profile=settings.LEDGER_PROFILE, creator_policy=settings.CREATOR_POLICY)

    if create_schema:
        init_db()

    batch = ActionBatch.model_validate(json.loads(Path(batch_path).read_text()))
    db_session: Session = next(get_db())
    credentials = open_credential_source()
    try:
        results = run_batch(batch, db_session, credentials)
    except Exception as e:
        logger.error("Unhandled exception", error=str(e))
        raise
    finally:
        db_session.close()
        if credentials is not None:
            credentials.close()

    for result in results:
        logger.info("Action result", **result.as_dict())
    return results
