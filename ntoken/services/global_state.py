"""
Process-wide ledger configuration.

GlobalState is read once when an execution starts, handed to every operation
through the ExecutionContext, and written back once when the execution ends.
"""

from dataclasses import dataclass, field
from typing import Set

import structlog
from sqlalchemy.orm import Session

from ntoken.models.global_state import GlobalStateRow, SINGLETON_ID

logger = structlog.get_logger()


@dataclass
class GlobalState:
    notaries: Set[str] = field(default_factory=set)
    creators: Set[str] = field(default_factory=set)
    check_creator: bool = False

    def add_notary(self, notary: str) -> None:
        self.notaries.add(notary)

    def remove_notary(self, notary: str) -> None:
        self.notaries.discard(notary)

    def is_notary(self, principal: str) -> bool:
        return principal in self.notaries

    def is_creator(self, principal: str) -> bool:
        return principal in self.creators


class GlobalStateStore:
    """Loads and persists the GlobalState singleton row."""

    def __init__(self, db_session: Session):
        self.db = db_session

    def load(self) -> GlobalState:
        row = self.db.get(GlobalStateRow, SINGLETON_ID)
        if row is None:
            return GlobalState()
        return GlobalState(
            notaries=set(row.notaries or []),
            creators=set(row.creators or []),
            check_creator=bool(row.check_creator),
        )

    def save(self, state: GlobalState) -> None:
        row = self.db.get(GlobalStateRow, SINGLETON_ID)
        if row is None:
            row = GlobalStateRow(id=SINGLETON_ID)
            self.db.add(row)
        row.notaries = sorted(state.notaries)
        row.creators = sorted(state.creators)
        row.check_creator = state.check_creator
        self.db.flush()
        logger.debug(
            "Global state persisted",
            notaries=len(state.notaries),
            creators=len(state.creators),
            check_creator=state.check_creator,
        )
