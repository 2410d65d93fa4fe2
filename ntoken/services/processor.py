from typing import Any, Callable, Dict, List, Optional

import structlog
from pydantic import BaseModel, ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ntoken.contracts import AccountDirectory, ExecutionContext, StaticAccountDirectory
from ntoken.services.actions import ACTION_MODELS, ActionEnvelope
from ntoken.services.allowance_store import AllowanceStore
from ntoken.services.authorization import AuthorizationGate, CredentialSource
from ntoken.services.capabilities import LedgerProfile
from ntoken.services.error_handler import ErrorHandler
from ntoken.services.global_state import GlobalStateStore
from ntoken.services.ledger import Ledger
from ntoken.services.symbol_registry import SymbolRegistry
from ntoken.utils.exceptions import (
    InvalidArgument,
    LedgerErrorCodes,
    LedgerException,
    ProcessingResult,
)


class ActionProcessor:
    """
    Runs one execution: loads GlobalState, applies each action in order, then
    persists GlobalState and commits. A rejected action is rolled back on its
    own and does not affect the others.
    """

    def __init__(
        self,
        db_session: Session,
        credentials: Optional[CredentialSource] = None,
        profile: Optional[LedgerProfile] = None,
        creator_policy: Optional[str] = None,
    ):
        self.db = db_session
        self.gate = AuthorizationGate(credentials, creator_policy)
        self.registry = SymbolRegistry(db_session, self.gate)
        self.allowances = AllowanceStore(db_session)
        self.ledger = Ledger(db_session, self.allowances, profile)
        self.state_store = GlobalStateStore(db_session)
        self.error_handler = ErrorHandler()
        self.logger = structlog.get_logger()

        self.handlers: Dict[str, Callable[[ExecutionContext, Any], Any]] = {
            "create": self._create,
            "issue": self._issue,
            "retire": self._retire,
            "burn": self._burn,
            "reclaim": self._reclaim,
            "transfer": self._transfer,
            "transferfrom": self._transferfrom,
            "approve": self._approve,
            "setnotary": lambda ctx, a: self.registry.set_notary(ctx, a.notary, a.add),
            "settokenuri": lambda ctx, a: self.registry.set_token_uri(ctx, a.symbol_id, a.url),
            "setipowner": lambda ctx, a: self.registry.set_ip_owner(ctx, a.symbol_id, a.owner),
            "notarize": lambda ctx, a: self.registry.notarize(ctx, a.notary, a.symbol_id),
            "setacctperms": self._set_account_permissions,
            "setcreator": lambda ctx, a: self.gate.set_creator(ctx, a.creator, a.add),
            "setcheck": lambda ctx, a: self.gate.set_check(ctx, a.check_creator),
        }

    def _create(self, ctx: ExecutionContext, action) -> ProcessingResult:
        symbol = self.registry.create(
            ctx, action.issuer, action.max_supply, action.symbol.to_symbol(), action.token_uri, action.ip_owner
        )
        return ProcessingResult(symbol_id=symbol.id, amount=action.max_supply)

    def _issue(self, ctx: ExecutionContext, action) -> ProcessingResult:
        quantity = action.quantity.to_asset()
        self.ledger.issue(ctx, action.to, quantity, action.memo)
        return ProcessingResult(symbol_id=quantity.symbol.id, amount=quantity.amount)

    def _retire(self, ctx: ExecutionContext, action) -> ProcessingResult:
        quantity = action.quantity.to_asset()
        self.ledger.retire(ctx, quantity, action.memo)
        return ProcessingResult(symbol_id=quantity.symbol.id, amount=quantity.amount)

    def _burn(self, ctx: ExecutionContext, action) -> ProcessingResult:
        quantity = action.quantity.to_asset()
        self.ledger.burn(ctx, action.owner, quantity, action.memo)
        return ProcessingResult(symbol_id=quantity.symbol.id, amount=quantity.amount)

    def _reclaim(self, ctx: ExecutionContext, action) -> ProcessingResult:
        symbol = action.symbol.to_symbol()
        reclaimed = self.ledger.reclaim(ctx, action.target, symbol, action.memo)
        return ProcessingResult(symbol_id=symbol.id, amount=reclaimed)

    def _transfer(self, ctx: ExecutionContext, action) -> None:
        assets = [asset.to_asset() for asset in action.assets]
        self.ledger.transfer(ctx, action.from_account, action.to, assets, action.memo)

    def _transferfrom(self, ctx: ExecutionContext, action) -> None:
        assets = [asset.to_asset() for asset in action.assets]
        self.ledger.transferfrom(ctx, action.owner, action.from_account, action.to, assets, action.memo)

    def _approve(self, ctx: ExecutionContext, action) -> None:
        self.allowances.approve(ctx, action.owner, action.spender, action.parent_id, action.amount)

    def _set_account_permissions(self, ctx: ExecutionContext, action) -> None:
        self.ledger.set_account_permissions(
            ctx, action.issuer, action.to, action.symbol.to_symbol(), action.allow_send, action.allow_recv
        )

    def parse_action(self, envelope: ActionEnvelope) -> BaseModel:
        model = ACTION_MODELS.get(envelope.name)
        if model is None:
            raise InvalidArgument(LedgerErrorCodes.UNKNOWN_ACTION, f"Unknown action: {envelope.name}")
        try:
            return model.model_validate(envelope.data)
        except ValidationError as e:
            raise InvalidArgument(LedgerErrorCodes.MALFORMED_ACTION, f"Malformed {envelope.name} payload: {e}") from e

    def process_action(self, ctx: ExecutionContext, envelope: ActionEnvelope) -> ProcessingResult:
        try:
            with structlog.contextvars.bound_contextvars(action=envelope.name):
                action = self.parse_action(envelope)
                outcome = self.handlers[envelope.name](ctx.with_signers(envelope.authorization), action)
        except LedgerException as e:
            self.error_handler.handle_validation_error(e, envelope.model_dump())
            return ProcessingResult(
                action=envelope.name,
                is_valid=False,
                error_code=e.error_code,
                error_message=e.message,
            )

        result = outcome if isinstance(outcome, ProcessingResult) else ProcessingResult()
        result.action = envelope.name
        result.is_valid = True
        return result

    def process_batch(
        self,
        actions: List[ActionEnvelope],
        accounts: Optional[AccountDirectory] = None,
    ) -> List[ProcessingResult]:
        state = self.state_store.load()
        ctx = ExecutionContext(state=state, accounts=accounts or StaticAccountDirectory())

        try:
            results = [self.process_action(ctx, envelope) for envelope in actions]
            self.state_store.save(state)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            self.error_handler.handle_database_error(e, {"actions": len(actions)})
            raise

        self.logger.info(
            "Batch processed",
            total=len(results),
            accepted=sum(1 for r in results if r.is_valid),
            rejected=sum(1 for r in results if not r.is_valid),
        )
        return results
