"""
Ledger rule validation service
"""

from typing import List, Optional

from sqlalchemy.orm import Session

from ntoken.config import settings
from ntoken.contracts import ExecutionContext, NAsset, Symbol
from ntoken.models.token_stats import TokenStats
from ntoken.utils.amounts import MAX_AMOUNT, is_integer_amount, is_valid_amount
from ntoken.utils.crypto import utf8_length
from ntoken.utils.exceptions import LedgerErrorCodes, ValidationResult


class LedgerValidator:
    """Validate operation inputs; never mutates state"""

    def __init__(self, db_session: Session):
        self.db = db_session

    def get_token(self, symbol_id: int) -> Optional[TokenStats]:
        return self.db.get(TokenStats, symbol_id)

    def validate_memo(self, memo: str) -> ValidationResult:
        if utf8_length(memo or "") > settings.MAX_MEMO_BYTES:
            return ValidationResult(
                False,
                LedgerErrorCodes.MEMO_TOO_LONG,
                f"memo has more than {settings.MAX_MEMO_BYTES} bytes",
            )
        return ValidationResult(True)

    def validate_token_uri(self, token_uri: str) -> ValidationResult:
        if utf8_length(token_uri or "") >= settings.MAX_TOKEN_URI_BYTES:
            return ValidationResult(
                False,
                LedgerErrorCodes.TOKEN_URI_TOO_LONG,
                f"token uri length >= {settings.MAX_TOKEN_URI_BYTES}",
            )
        return ValidationResult(True)

    def validate_account(self, ctx: ExecutionContext, name: str, role: str, allow_empty: bool = False) -> ValidationResult:
        if allow_empty and not name:
            return ValidationResult(True)
        if not ctx.is_account(name):
            return ValidationResult(
                False,
                LedgerErrorCodes.UNKNOWN_ACCOUNT,
                f"{role} account does not exist: {name!r}",
            )
        return ValidationResult(True)

    def validate_max_supply(self, max_supply: int) -> ValidationResult:
        if not is_integer_amount(max_supply) or max_supply <= 0:
            return ValidationResult(False, LedgerErrorCodes.INVALID_AMOUNT, "max-supply must be positive")
        if max_supply > MAX_AMOUNT:
            return ValidationResult(False, LedgerErrorCodes.INVALID_AMOUNT, "max-supply exceeds int64 range")
        return ValidationResult(True)

    def validate_symbol(self, symbol: Symbol) -> ValidationResult:
        if not symbol.is_valid():
            return ValidationResult(False, LedgerErrorCodes.INVALID_SYMBOL, f"invalid symbol: {symbol}")
        return ValidationResult(True)

    def validate_new_symbol(self, symbol: Symbol, token_uri_hash: str) -> ValidationResult:
        result = self.validate_symbol(symbol)
        if not result:
            return result

        duplicate_uri = self.db.query(TokenStats.symbol_id).filter(TokenStats.token_uri_hash == token_uri_hash).first()
        if duplicate_uri is not None:
            return ValidationResult(
                False,
                LedgerErrorCodes.TOKEN_URI_ALREADY_EXISTS,
                "token with token_uri already exists",
            )

        if symbol.id != 0:
            if self.get_token(symbol.id) is not None:
                return ValidationResult(
                    False,
                    LedgerErrorCodes.TOKEN_ALREADY_EXISTS,
                    f"token of ID: {symbol.id} already exists",
                )
            if symbol.id == symbol.parent_id:
                return ValidationResult(
                    False,
                    LedgerErrorCodes.INVALID_SYMBOL,
                    "parent id shall not be equal to id",
                )

        return ValidationResult(True)

    def validate_quantity(self, quantity: NAsset, token: Optional[TokenStats], verb: str) -> ValidationResult:
        if token is None:
            return ValidationResult(
                False,
                LedgerErrorCodes.TOKEN_NOT_FOUND,
                f"token with symbol does not exist: {quantity.symbol.id}",
            )

        if not is_valid_amount(quantity.amount):
            return ValidationResult(
                False,
                LedgerErrorCodes.INVALID_AMOUNT,
                f"must {verb} positive quantity",
            )

        if quantity.symbol != token.symbol:
            return ValidationResult(
                False,
                LedgerErrorCodes.SYMBOL_MISMATCH,
                f"symbol mismatch: {quantity.symbol} vs {token.symbol}",
            )

        return ValidationResult(True)

    def validate_transfer_header(
        self,
        ctx: ExecutionContext,
        from_account: str,
        to: str,
        assets: List[NAsset],
        memo: str,
        max_assets: Optional[int] = None,
    ) -> ValidationResult:
        if from_account == to:
            return ValidationResult(False, LedgerErrorCodes.SELF_TRANSFER, "cannot transfer to self")

        result = self.validate_account(ctx, to, "to")
        if not result:
            return result

        result = self.validate_memo(memo)
        if not result:
            return result

        if not assets:
            return ValidationResult(False, LedgerErrorCodes.INVALID_ASSET_COUNT, "no assets to transfer")

        if max_assets is not None and len(assets) > max_assets:
            return ValidationResult(
                False,
                LedgerErrorCodes.INVALID_ASSET_COUNT,
                f"assets size must not exceed {max_assets}",
            )

        return ValidationResult(True)
