"""
Read-only balance and supply queries.
"""

from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from ntoken.contracts import Symbol
from ntoken.models.balance import Balance
from ntoken.models.token_stats import TokenStats
from ntoken.utils.exceptions import InvalidArgument, LedgerErrorCodes, NotFound

# Upper bound on family members inspected by get_balance_by_parent.
MAX_BALANCE_COUNT = 30


class BalanceQueryService:
    def __init__(self, db_session: Session):
        self.db = db_session
        self.logger = structlog.get_logger()

    def get_token(self, symbol_id: int) -> TokenStats:
        token = self.db.get(TokenStats, symbol_id)
        if token is None:
            raise NotFound(LedgerErrorCodes.TOKEN_NOT_FOUND, f"token not found: {symbol_id}")
        return token

    def get_supply(self, symbol_id: int) -> int:
        return self.get_token(symbol_id).supply

    def get_total_balance(self, symbol_id: int) -> int:
        """Sum of all account balances for a symbol, paused rows included."""
        return Balance.get_total_balance(self.db, symbol_id)

    def find_balance(self, owner: str, symbol_id: int) -> Optional[Balance]:
        return Balance.find(self.db, owner, symbol_id)

    def get_balance(self, owner: str, symbol: Symbol) -> int:
        """Stored amount, or 0 while the row is paused."""
        if not symbol.is_valid():
            raise InvalidArgument(LedgerErrorCodes.INVALID_SYMBOL, f"invalid symbol: {symbol}")
        row = Balance.find(self.db, owner, symbol.id)
        if row is None or row.parent_id != symbol.parent_id:
            raise NotFound(LedgerErrorCodes.BALANCE_NOT_FOUND, "no balance object found")
        return row.available

    def list_family(self, parent_id: int, limit: int = MAX_BALANCE_COUNT) -> List[TokenStats]:
        return (
            self.db.query(TokenStats)
            .filter(TokenStats.parent_id == parent_id)
            .order_by(TokenStats.parent_id, TokenStats.symbol_id)
            .limit(limit)
            .all()
        )

    def get_balance_by_parent(self, owner: str, parent_id: int) -> int:
        """
        Sum of ``owner``'s unpaused balances across a family.

        Only the first MAX_BALANCE_COUNT symbols of the family (ordered by id)
        are inspected; callers needing the full family must page through
        list_family themselves.
        """
        symbol_ids = [token.symbol_id for token in self.list_family(parent_id)]
        if not symbol_ids:
            return 0

        rows = (
            self.db.query(Balance)
            .filter(Balance.owner == owner, Balance.symbol_id.in_(symbol_ids))
            .all()
        )
        total = sum(row.available for row in rows)
        self.logger.debug(
            "Family balance computed",
            owner=owner,
            parent_id=parent_id,
            inspected=len(symbol_ids),
            total=total,
        )
        return total
