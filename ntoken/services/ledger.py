"""
Per-account balances and the state transitions that move value.

Every value-moving path either moves an amount between two accounts or
between a token's supply and one account, so for each symbol the sum of
balances always equals TokenStats.supply. Each public operation runs in a
SAVEPOINT and leaves no trace when it raises.
"""

from typing import List, Optional

import structlog
from sqlalchemy.orm import Session

from ntoken.config import settings
from ntoken.contracts import ExecutionContext, NAsset, Symbol
from ntoken.database.connection import atomic
from ntoken.models.balance import Balance
from ntoken.models.token_stats import TokenStats
from ntoken.services.allowance_store import AllowanceStore
from ntoken.services.capabilities import LedgerProfile, TransferLeg, get_ledger_profile
from ntoken.services.validator import LedgerValidator
from ntoken.utils.amounts import is_amount_greater_than, subtract_amounts
from ntoken.utils.exceptions import (
    InsufficientFunds,
    InsufficientSupply,
    InvalidArgument,
    LedgerErrorCodes,
    NotFound,
    PolicyViolation,
    Unauthorized,
    raise_for_result,
)


class Ledger:
    def __init__(
        self,
        db_session: Session,
        allowances: Optional[AllowanceStore] = None,
        profile: Optional[LedgerProfile] = None,
    ):
        self.db = db_session
        self.allowances = allowances or AllowanceStore(db_session)
        self.profile = profile or get_ledger_profile(settings.LEDGER_PROFILE)
        self.validator = LedgerValidator(db_session)
        self.logger = structlog.get_logger()

    def _get_token(self, symbol: Symbol) -> TokenStats:
        raise_for_result(self.validator.validate_symbol(symbol))
        token = self.validator.get_token(symbol.id)
        if token is None:
            raise NotFound(LedgerErrorCodes.TOKEN_NOT_FOUND, f"token with symbol does not exist: {symbol.id}")
        return token

    def _get_balance_row(self, owner: str, symbol: Symbol) -> Balance:
        row = Balance.find(self.db, owner, symbol.id)
        if row is None:
            raise NotFound(LedgerErrorCodes.BALANCE_NOT_FOUND, f"no balance object found for {owner}")
        return row

    def add_balance(self, owner: str, value: NAsset, payer: str) -> Balance:
        row = Balance.find(self.db, owner, value.symbol.id)
        if row is None:
            return Balance.create(
                self.db,
                owner=owner,
                symbol_id=value.symbol.id,
                parent_id=value.symbol.parent_id,
                payer=payer,
                amount=value.amount,
            )

        try:
            row.add_amount(value.amount)
        except ValueError as e:
            raise InvalidArgument(LedgerErrorCodes.AMOUNT_OVERFLOW, str(e)) from e
        self.db.flush()
        return row

    def sub_balance(self, owner: str, value: NAsset) -> Balance:
        row = self._get_balance_row(owner, value.symbol)
        if not row.subtract_amount(value.amount):
            raise InsufficientFunds(
                LedgerErrorCodes.INSUFFICIENT_BALANCE,
                f"overdrawn balance: {row.amount} < {value.amount}",
            )
        self.db.flush()
        return row

    def issue(self, ctx: ExecutionContext, to: str, quantity: NAsset, memo: str = "") -> None:
        """Mint ``quantity`` into the issuer's own account."""
        raise_for_result(self.validator.validate_memo(memo))
        token = self._get_token(quantity.symbol)
        if to != token.issuer:
            raise InvalidArgument(LedgerErrorCodes.INVALID_RECIPIENT, "tokens can only be issued to issuer account")

        ctx.require_auth(token.issuer)
        raise_for_result(self.validator.validate_quantity(quantity, token, "issue"))

        available = token.max_supply - token.supply
        if is_amount_greater_than(quantity.amount, available):
            raise InsufficientSupply(
                LedgerErrorCodes.EXCEEDS_MAX_SUPPLY,
                f"quantity exceeds available supply: {quantity.amount} > {available}",
            )

        with atomic(self.db):
            token.supply += quantity.amount
            token.issued_at = ctx.now()
            self.add_balance(token.issuer, quantity, token.issuer)

        self.logger.info("Tokens issued", symbol_id=token.symbol_id, amount=quantity.amount, supply=token.supply)

    def retire(self, ctx: ExecutionContext, quantity: NAsset, memo: str = "") -> None:
        """Destroy ``quantity`` held by the issuer itself."""
        raise_for_result(self.validator.validate_memo(memo))
        token = self._get_token(quantity.symbol)

        ctx.require_auth(token.issuer)
        raise_for_result(self.validator.validate_quantity(quantity, token, "retire"))

        with atomic(self.db):
            self.sub_balance(token.issuer, quantity)
            token.supply = subtract_amounts(token.supply, quantity.amount)
            self.db.flush()

        self.logger.info("Tokens retired", symbol_id=token.symbol_id, amount=quantity.amount, supply=token.supply)

    def burn(self, ctx: ExecutionContext, owner: str, quantity: NAsset, memo: str = "") -> None:
        """Issuer-forced destruction out of ``owner``'s account; ignores transfer permissions."""
        raise_for_result(self.validator.validate_memo(memo))
        token = self._get_token(quantity.symbol)

        ctx.require_auth(token.issuer)
        raise_for_result(self.validator.validate_quantity(quantity, token, "burn"))

        with atomic(self.db):
            self.sub_balance(owner, quantity)
            token.supply = subtract_amounts(token.supply, quantity.amount)
            self.db.flush()

        self.logger.info(
            "Tokens burned",
            symbol_id=token.symbol_id,
            owner=owner,
            amount=quantity.amount,
            supply=token.supply,
        )

    def reclaim(self, ctx: ExecutionContext, target: str, symbol: Symbol, memo: str = "") -> int:
        """Zero ``target``'s balance of ``symbol`` and shrink supply by the same amount."""
        ctx.require_any_auth(settings.GOVERNANCE_PRINCIPALS, "not authorized to reclaim")
        raise_for_result(self.validator.validate_memo(memo))

        token = self._get_token(symbol)
        if symbol != token.symbol:
            raise InvalidArgument(LedgerErrorCodes.SYMBOL_MISMATCH, f"symbol mismatch: {symbol} vs {token.symbol}")

        row = self._get_balance_row(target, symbol)
        if row.amount < 1:
            raise NotFound(LedgerErrorCodes.BALANCE_NOT_FOUND, f"nothing to reclaim from {target}")

        with atomic(self.db):
            reclaimed = row.amount
            row.amount = 0
            token.supply = subtract_amounts(token.supply, reclaimed)
            self.db.flush()

        self.logger.info("Balance reclaimed", symbol_id=symbol.id, target=target, amount=reclaimed)
        return reclaimed

    def _move(self, sender: str, recipient: str, quantity: NAsset, payer: str) -> None:
        token = self._get_token(quantity.symbol)
        raise_for_result(self.validator.validate_quantity(quantity, token, "transfer"))

        sender_row = self._get_balance_row(sender, quantity.symbol)
        recipient_row = Balance.find(self.db, recipient, quantity.symbol.id)
        leg = TransferLeg(
            sender=sender,
            recipient=recipient,
            quantity=quantity,
            sender_row=sender_row,
            recipient_row=recipient_row,
        )
        raise_for_result(self.profile.check_leg(leg))

        self.sub_balance(sender, quantity)
        self.add_balance(recipient, quantity, payer)

    def transfer(self, ctx: ExecutionContext, from_account: str, to: str, assets: List[NAsset], memo: str = "") -> None:
        if from_account == to:
            raise InvalidArgument(LedgerErrorCodes.SELF_TRANSFER, "cannot transfer to self")
        ctx.require_auth(from_account)
        raise_for_result(
            self.validator.validate_transfer_header(
                ctx, from_account, to, assets, memo, max_assets=self.profile.max_assets_per_transfer
            )
        )
        # The recipient pays for new rows only when it co-signed.
        payer = to if ctx.has_auth(to) else from_account

        with atomic(self.db):
            for quantity in assets:
                self._move(from_account, to, quantity, payer)

        self.logger.info(
            "Transfer completed",
            sender=from_account,
            recipient=to,
            assets=[(a.symbol.id, a.amount) for a in assets],
        )

    def transferfrom(
        self,
        ctx: ExecutionContext,
        delegate: str,
        from_account: str,
        to: str,
        assets: List[NAsset],
        memo: str = "",
    ) -> None:
        """Move ``from_account``'s assets on its behalf, spending the delegate's allowance."""
        if not self.profile.allow_delegated_transfer:
            raise PolicyViolation(
                LedgerErrorCodes.DELEGATION_DISABLED,
                f"delegated transfers are disabled for the {self.profile.name} ledger",
            )
        if from_account == to:
            raise InvalidArgument(LedgerErrorCodes.SELF_TRANSFER, "cannot transfer to self")
        ctx.require_auth(delegate)
        raise_for_result(
            self.validator.validate_transfer_header(
                ctx, from_account, to, assets, memo, max_assets=self.profile.max_assets_per_transfer
            )
        )

        if not self.allowances.get_limits(from_account, delegate):
            raise Unauthorized(LedgerErrorCodes.ALLOWANCE_NOT_FOUND, "Unauthorized")

        with atomic(self.db):
            for quantity in assets:
                token = self._get_token(quantity.symbol)
                raise_for_result(self.validator.validate_quantity(quantity, token, "transfer"))
                self.allowances.consume(from_account, delegate, quantity.symbol.parent_id, quantity.amount)
                self._move(from_account, to, quantity, delegate)

        self.logger.info(
            "Delegated transfer completed",
            delegate=delegate,
            sender=from_account,
            recipient=to,
            assets=[(a.symbol.id, a.amount) for a in assets],
        )

    def set_account_permissions(
        self,
        ctx: ExecutionContext,
        issuer: str,
        to: str,
        symbol: Symbol,
        allow_send: bool,
        allow_recv: bool,
    ) -> None:
        """Set ``to``'s send/receive flags for ``symbol``; the amount is left untouched."""
        ctx.require_auth(issuer)
        raise_for_result(self.validator.validate_account(ctx, to, "to"))

        token = self._get_token(symbol)
        if issuer != token.issuer:
            raise Unauthorized(LedgerErrorCodes.MISSING_AUTHORITY, f"issuer: {token.issuer} vs {issuer}")
        if symbol != token.symbol:
            raise InvalidArgument(LedgerErrorCodes.SYMBOL_MISMATCH, f"symbol mismatch: {symbol} vs {token.symbol}")

        with atomic(self.db):
            row = Balance.find(self.db, to, symbol.id)
            if row is None:
                Balance.create(
                    self.db,
                    owner=to,
                    symbol_id=symbol.id,
                    parent_id=symbol.parent_id,
                    payer=issuer,
                    amount=0,
                    allow_send=allow_send,
                    allow_recv=allow_recv,
                )
            else:
                row.allow_send = allow_send
                row.allow_recv = allow_recv
                self.db.flush()

        self.logger.info(
            "Account permissions set",
            symbol_id=symbol.id,
            account=to,
            allow_send=allow_send,
            allow_recv=allow_recv,
        )
