"""
Composable transfer-gating capabilities.

Permission flags (CanSend / CanReceive), the singleton cap and delegated
allowances (HasAllowance) are independent checks. A LedgerProfile picks which
of them guard the generic transfer path.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

from ntoken.contracts import NAsset
from ntoken.models.balance import Balance
from ntoken.utils.exceptions import LedgerErrorCodes, ValidationResult


@dataclass(frozen=True)
class TransferLeg:
    """One asset moving between two accounts, with both balance rows as they are now."""

    sender: str
    recipient: str
    quantity: NAsset
    sender_row: Optional[Balance]
    recipient_row: Optional[Balance]


class TransferCheck(ABC):
    @abstractmethod
    def check(self, leg: TransferLeg) -> ValidationResult:
        pass


class CanSend(TransferCheck):
    def check(self, leg: TransferLeg) -> ValidationResult:
        if leg.sender_row is not None and leg.sender_row.allow_send:
            return ValidationResult(True)
        return ValidationResult(False, LedgerErrorCodes.TRANSFER_NOT_PERMITTED, f"{leg.sender} may not send")


class CanReceive(TransferCheck):
    def check(self, leg: TransferLeg) -> ValidationResult:
        if leg.recipient_row is not None and leg.recipient_row.allow_recv:
            return ValidationResult(True)
        return ValidationResult(False, LedgerErrorCodes.TRANSFER_NOT_PERMITTED, f"{leg.recipient} may not receive")


class PermissionFlagCheck(TransferCheck):
    """Passes when the sender may send, or the recipient whitelisted itself to receive."""

    def __init__(self):
        self.can_send = CanSend()
        self.can_receive = CanReceive()

    def check(self, leg: TransferLeg) -> ValidationResult:
        if self.can_send.check(leg) or self.can_receive.check(leg):
            return ValidationResult(True)
        return ValidationResult(False, LedgerErrorCodes.TRANSFER_NOT_PERMITTED, "no permission for transfer")


class SingletonCapCheck(TransferCheck):
    """An account holds at most one unit of a singleton symbol."""

    def check(self, leg: TransferLeg) -> ValidationResult:
        held = leg.recipient_row.amount if leg.recipient_row is not None else 0
        if held != 0 or leg.quantity.amount > 1:
            return ValidationResult(
                False,
                LedgerErrorCodes.SINGLETON_CAP_EXCEEDED,
                "You can't receive more than one unit of this token",
            )
        return ValidationResult(True)


class HasAllowance:
    """Delegate may move ``amount`` of family ``parent_id`` out of the owner's account."""

    def check(self, limits: Dict[int, int], parent_id: int, amount: int) -> ValidationResult:
        if parent_id not in limits:
            return ValidationResult(
                False,
                LedgerErrorCodes.ALLOWANCE_NOT_FOUND,
                f"Unauthorized NFT PID: {parent_id}",
            )
        if limits[parent_id] < amount:
            return ValidationResult(False, LedgerErrorCodes.ALLOWANCE_EXCEEDED, "Overdrawn nfts")
        return ValidationResult(True)


@dataclass(frozen=True)
class LedgerProfile:
    name: str
    max_assets_per_transfer: Optional[int]
    transfer_checks: Tuple[TransferCheck, ...]
    allow_delegated_transfer: bool

    def check_leg(self, leg: TransferLeg) -> ValidationResult:
        for transfer_check in self.transfer_checks:
            result = transfer_check.check(leg)
            if not result:
                return result
        return ValidationResult(True)


GENERIC_PROFILE = LedgerProfile(
    name="generic",
    max_assets_per_transfer=None,
    transfer_checks=(),
    allow_delegated_transfer=True,
)

CREDENTIAL_PROFILE = LedgerProfile(
    name="credential",
    max_assets_per_transfer=1,
    transfer_checks=(SingletonCapCheck(), PermissionFlagCheck()),
    allow_delegated_transfer=False,
)

LEDGER_PROFILES: Dict[str, LedgerProfile] = {
    GENERIC_PROFILE.name: GENERIC_PROFILE,
    CREDENTIAL_PROFILE.name: CREDENTIAL_PROFILE,
}


def get_ledger_profile(name: str) -> LedgerProfile:
    if name not in LEDGER_PROFILES:
        raise ValueError(f"Unknown ledger profile: {name}")
    return LEDGER_PROFILES[name]
