"""
Delegated spending limits.

Each (owner, spender, parent_id) triple holds the remaining amount the spender
may move out of the owner's account for that token family. An owner may have
any number of spenders at once.
"""

from typing import Dict

import structlog
from sqlalchemy.orm import Session

from ntoken.contracts import ExecutionContext, Symbol
from ntoken.database.connection import atomic
from ntoken.models.allowance import Allowance
from ntoken.services.capabilities import HasAllowance
from ntoken.utils.amounts import is_non_negative_amount
from ntoken.utils.exceptions import InvalidArgument, LedgerErrorCodes, raise_for_result


class AllowanceStore:
    def __init__(self, db_session: Session):
        self.db = db_session
        self.has_allowance = HasAllowance()
        self.logger = structlog.get_logger()

    def _find(self, owner: str, spender: str, parent_id: int) -> Allowance:
        return self.db.query(Allowance).filter_by(owner=owner, spender=spender, parent_id=parent_id).first()

    def get_limits(self, owner: str, spender: str) -> Dict[int, int]:
        rows = self.db.query(Allowance).filter_by(owner=owner, spender=spender).all()
        return {row.parent_id: row.remaining for row in rows}

    def approve(self, ctx: ExecutionContext, owner: str, spender: str, parent_id: int, amount: int) -> None:
        """Set (not add to) the limit ``spender`` may move for family ``parent_id``."""
        ctx.require_auth(owner)
        if not is_non_negative_amount(amount):
            raise InvalidArgument(LedgerErrorCodes.INVALID_AMOUNT, f"invalid allowance amount: {amount}")
        if not Symbol(id=0, parent_id=parent_id).is_valid():
            raise InvalidArgument(LedgerErrorCodes.INVALID_SYMBOL, f"invalid parent id: {parent_id}")

        with atomic(self.db):
            row = self._find(owner, spender, parent_id)
            if row is None:
                row = Allowance(owner=owner, spender=spender, parent_id=parent_id, remaining=amount)
                self.db.add(row)
            else:
                row.remaining = amount
            self.db.flush()

        self.logger.info("Allowance approved", owner=owner, spender=spender, parent_id=parent_id, amount=amount)

    def consume(self, owner: str, spender: str, parent_id: int, amount: int) -> int:
        """Check and decrement the limit for family ``parent_id``; returns what is left."""
        row = self._find(owner, spender, parent_id)
        limits = {row.parent_id: row.remaining} if row is not None else {}
        raise_for_result(self.has_allowance.check(limits, parent_id, amount))

        row.remaining -= amount
        self.db.flush()
        return row.remaining
