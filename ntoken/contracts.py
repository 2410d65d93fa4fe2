from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, FrozenSet, Iterable, TYPE_CHECKING

from ntoken.config import settings
from ntoken.utils.exceptions import LedgerErrorCodes, Unauthorized

if TYPE_CHECKING:
    from ntoken.services.global_state import GlobalState

# Ids are stored in signed 64-bit columns.
MAX_SYMBOL_ID = 2**63 - 1
MAX_PARENT_ID = 2**32 - 1


@dataclass(frozen=True)
class Symbol:
    """Token type: ``id`` within its family ``parent_id``."""

    id: int
    parent_id: int = 0

    @property
    def raw(self) -> int:
        return (self.parent_id << 32) | self.id

    def is_valid(self) -> bool:
        return 0 <= self.id <= MAX_SYMBOL_ID and 0 <= self.parent_id <= MAX_PARENT_ID


@dataclass(frozen=True)
class NAsset:
    amount: int
    symbol: Symbol


class AccountDirectory(ABC):
    """Host-provided view of which principals exist."""

    @abstractmethod
    def is_account(self, name: str) -> bool:
        pass


class StaticAccountDirectory(AccountDirectory):
    def __init__(self, accounts: Iterable[str] = ()):
        self._accounts = set(accounts)

    def add(self, name: str) -> None:
        self._accounts.add(name)

    def is_account(self, name: str) -> bool:
        return name in self._accounts


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ExecutionContext:
    """
    Everything one call needs from its host: the principals that authorized
    it, the account directory, the clock and the GlobalState of the current
    execution.
    """

    state: "GlobalState"
    accounts: AccountDirectory
    signers: FrozenSet[str] = field(default_factory=frozenset)
    clock: Callable[[], datetime] = utc_now
    self_authority: str = field(default_factory=lambda: settings.SELF_AUTHORITY)

    def has_auth(self, principal: str) -> bool:
        return principal in self.signers

    def require_auth(self, principal: str) -> None:
        if not self.has_auth(principal):
            raise Unauthorized(LedgerErrorCodes.MISSING_AUTHORITY, f"missing authority of {principal}")

    def require_any_auth(self, principals: Iterable[str], message: str = "no auth") -> None:
        if not any(self.has_auth(p) for p in principals):
            raise Unauthorized(LedgerErrorCodes.MISSING_AUTHORITY, message)

    def require_self(self) -> None:
        self.require_auth(self.self_authority)

    def is_account(self, name: str) -> bool:
        return self.accounts.is_account(name)

    def now(self) -> datetime:
        return self.clock()

    def with_signers(self, signers: Iterable[str]) -> "ExecutionContext":
        """Same execution, different call authorization."""
        return ExecutionContext(
            state=self.state,
            accounts=self.accounts,
            signers=frozenset(signers),
            clock=self.clock,
            self_authority=self.self_authority,
        )
