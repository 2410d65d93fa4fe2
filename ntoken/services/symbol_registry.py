"""
Token definitions, symbol-id allocation and the token-URI uniqueness index.
"""

import structlog
from sqlalchemy.orm import Session

from ntoken.config import settings
from ntoken.contracts import ExecutionContext, Symbol
from ntoken.database.connection import atomic
from ntoken.models.token_stats import TokenStats
from ntoken.services.authorization import AuthorizationGate
from ntoken.services.validator import LedgerValidator
from ntoken.utils.crypto import token_uri_hash
from ntoken.utils.exceptions import LedgerErrorCodes, NotFound, raise_for_result


class SymbolRegistry:
    def __init__(self, db_session: Session, gate: AuthorizationGate):
        self.db = db_session
        self.gate = gate
        self.validator = LedgerValidator(db_session)
        self.logger = structlog.get_logger()

    def get(self, symbol_id: int) -> TokenStats:
        raise_for_result(self.validator.validate_symbol(Symbol(id=symbol_id)))
        token = self.validator.get_token(symbol_id)
        if token is None:
            raise NotFound(LedgerErrorCodes.TOKEN_NOT_FOUND, f"token not found: {symbol_id}")
        return token

    def _require_admin(self, ctx: ExecutionContext, message: str) -> None:
        ctx.require_any_auth([ctx.self_authority, *settings.ADMIN_PRINCIPALS], message)

    def create(
        self,
        ctx: ExecutionContext,
        issuer: str,
        max_supply: int,
        symbol: Symbol,
        token_uri: str,
        ip_owner: str = "",
    ) -> Symbol:
        """
        Register a new token type.

        A zero ``symbol.id`` asks for the next free id. The row starts with
        zero supply; ``issue`` mints into it.
        """
        ctx.require_auth(issuer)

        raise_for_result(self.validator.validate_account(ctx, issuer, "issuer"))
        raise_for_result(self.validator.validate_account(ctx, ip_owner, "ipowner", allow_empty=True))
        raise_for_result(self.validator.validate_max_supply(max_supply))
        raise_for_result(self.validator.validate_token_uri(token_uri))

        self.gate.require_creator(ctx.state, issuer)

        uri_hash = token_uri_hash(token_uri)
        raise_for_result(self.validator.validate_new_symbol(symbol, uri_hash))

        with atomic(self.db):
            if symbol.id == 0:
                symbol = Symbol(id=TokenStats.next_available_id(self.db), parent_id=symbol.parent_id)

            token = TokenStats(
                symbol_id=symbol.id,
                parent_id=symbol.parent_id,
                supply=0,
                max_supply=max_supply,
                issuer=issuer,
                ip_owner=ip_owner or "",
                token_uri=token_uri,
                token_uri_hash=uri_hash,
                issued_at=ctx.now(),
            )
            self.db.add(token)
            self.db.flush()

        self.logger.info(
            "Token created",
            symbol_id=symbol.id,
            parent_id=symbol.parent_id,
            issuer=issuer,
            max_supply=max_supply,
        )
        return symbol

    def set_token_uri(self, ctx: ExecutionContext, symbol_id: int, url: str) -> None:
        # Uniqueness is only enforced at creation; an admin may point two tokens at one URI.
        self._require_admin(ctx, "non authorized")
        raise_for_result(self.validator.validate_token_uri(url))

        with atomic(self.db):
            token = self.get(symbol_id)
            token.token_uri = url
            token.token_uri_hash = token_uri_hash(url)
            self.db.flush()

        self.logger.info("Token URI updated", symbol_id=symbol_id)

    def set_ip_owner(self, ctx: ExecutionContext, symbol_id: int, owner: str) -> None:
        self._require_admin(ctx, "no auth")
        raise_for_result(self.validator.validate_account(ctx, owner, "ipowner", allow_empty=True))

        with atomic(self.db):
            token = self.get(symbol_id)
            token.ip_owner = owner or ""
            self.db.flush()

        self.logger.info("IP owner updated", symbol_id=symbol_id, ip_owner=owner)

    def notarize(self, ctx: ExecutionContext, notary: str, symbol_id: int) -> None:
        ctx.require_auth(notary)
        self.gate.require_notary(ctx.state, notary)

        with atomic(self.db):
            token = self.get(symbol_id)
            token.notary = notary
            token.notarized_at = ctx.now().replace(microsecond=0)
            self.db.flush()

        self.logger.info("Token notarized", symbol_id=symbol_id, notary=notary)

    def set_notary(self, ctx: ExecutionContext, notary: str, add: bool) -> None:
        ctx.require_self()
        if add:
            ctx.state.add_notary(notary)
        else:
            ctx.state.remove_notary(notary)
        self.logger.info("Notary set updated", notary=notary, added=add)
