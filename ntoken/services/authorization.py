"""
Policy predicates gating privileged operations.

Token-family creation is gated by a pluggable creator policy. Two shapes are
in use and both are kept as named strategies; CREATOR_POLICY selects one and
GlobalState.check_creator switches the gate off entirely.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

import structlog
from sqlalchemy.orm import Session

from ntoken.config import settings
from ntoken.contracts import ExecutionContext
from ntoken.models.balance import Balance
from ntoken.services.global_state import GlobalState
from ntoken.utils.exceptions import (
    AlreadyExists,
    LedgerErrorCodes,
    NotFound,
    Unauthorized,
)

logger = structlog.get_logger()


class CredentialSource(ABC):
    """Answers whether a principal holds the external credential."""

    @abstractmethod
    def has_credential(self, principal: str) -> bool:
        pass


class LedgerCredentialSource(CredentialSource):
    """Reads a positive, unpaused credential balance from another ledger instance."""

    def __init__(self, db_session: Session, symbol_id: Optional[int] = None):
        self.db = db_session
        self.symbol_id = settings.CREDENTIAL_SYMBOL_ID if symbol_id is None else symbol_id

    def has_credential(self, principal: str) -> bool:
        row = Balance.find(self.db, principal, self.symbol_id)
        return row is not None and row.available > 0

    def close(self) -> None:
        """Release the session and the engine it was opened on."""
        bind = self.db.get_bind()
        self.db.close()
        bind.dispose()


class NoCredentialSource(CredentialSource):
    """Used when no credential ledger is configured: nobody holds the credential."""

    def has_credential(self, principal: str) -> bool:
        return False


class CreatorPolicy(ABC):
    name = ""

    @abstractmethod
    def allows(self, creator: str, state: GlobalState, credentials: CredentialSource) -> bool:
        pass


class DisabledPolicy(CreatorPolicy):
    name = "disabled"

    def allows(self, creator: str, state: GlobalState, credentials: CredentialSource) -> bool:
        return True


class CredentialOrWhitelistPolicy(CreatorPolicy):
    name = "credential_or_whitelist"

    def allows(self, creator: str, state: GlobalState, credentials: CredentialSource) -> bool:
        return credentials.has_credential(creator) or state.is_creator(creator)


class WhitelistAndCredentialPolicy(CreatorPolicy):
    name = "whitelist_and_credential"

    def allows(self, creator: str, state: GlobalState, credentials: CredentialSource) -> bool:
        return state.is_creator(creator) and credentials.has_credential(creator)


CREATOR_POLICIES: Dict[str, Type[CreatorPolicy]] = {
    DisabledPolicy.name: DisabledPolicy,
    CredentialOrWhitelistPolicy.name: CredentialOrWhitelistPolicy,
    WhitelistAndCredentialPolicy.name: WhitelistAndCredentialPolicy,
}


def get_creator_policy(name: str) -> CreatorPolicy:
    if name not in CREATOR_POLICIES:
        raise ValueError(f"Unknown creator policy: {name}")
    return CREATOR_POLICIES[name]()


class AuthorizationGate:
    def __init__(self, credentials: Optional[CredentialSource] = None, policy_name: Optional[str] = None):
        self.credentials = credentials or NoCredentialSource()
        self.policy = get_creator_policy(policy_name or settings.CREATOR_POLICY)

    def active_policy(self, state: GlobalState) -> CreatorPolicy:
        if not state.check_creator:
            return DisabledPolicy()
        return self.policy

    def require_creator(self, state: GlobalState, creator: str) -> None:
        policy = self.active_policy(state)
        if not policy.allows(creator, state, self.credentials):
            logger.warning("Creator rejected", creator=creator, policy=policy.name)
            raise Unauthorized(LedgerErrorCodes.CREATOR_NOT_AUTHORIZED, "creator is not authenticated")

    def require_notary(self, state: GlobalState, notary: str) -> None:
        if not state.is_notary(notary):
            raise Unauthorized(LedgerErrorCodes.NOTARY_NOT_AUTHORIZED, "not authorized notary")

    def set_creator(self, ctx: ExecutionContext, creator: str, add: bool) -> None:
        ctx.require_self()
        if not ctx.is_account(creator):
            raise NotFound(LedgerErrorCodes.UNKNOWN_ACCOUNT, f"creator does not exist: {creator}")

        if add:
            if ctx.state.is_creator(creator):
                raise AlreadyExists(LedgerErrorCodes.CREATOR_ALREADY_EXISTS, "Creator already existing")
            ctx.state.creators.add(creator)
        else:
            if not ctx.state.is_creator(creator):
                raise NotFound(LedgerErrorCodes.CREATOR_NOT_FOUND, "Creator not found")
            ctx.state.creators.discard(creator)

        logger.info("Creator whitelist updated", creator=creator, added=add)

    def set_check(self, ctx: ExecutionContext, check_creator: bool) -> None:
        ctx.require_self()
        ctx.state.check_creator = bool(check_creator)
        logger.info("Creator check toggled", check_creator=check_creator)
