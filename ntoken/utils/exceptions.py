"""
NToken ledger exceptions and standardized error codes
"""

from typing import Dict, Optional, Type


class LedgerErrorCodes:
    """Standardized error codes for ledger operations"""

    # Malformed input
    INVALID_AMOUNT = "INVALID_AMOUNT"
    INVALID_SYMBOL = "INVALID_SYMBOL"
    SYMBOL_MISMATCH = "SYMBOL_MISMATCH"
    MEMO_TOO_LONG = "MEMO_TOO_LONG"
    TOKEN_URI_TOO_LONG = "TOKEN_URI_TOO_LONG"
    SELF_TRANSFER = "SELF_TRANSFER"
    INVALID_ASSET_COUNT = "INVALID_ASSET_COUNT"
    INVALID_RECIPIENT = "INVALID_RECIPIENT"
    AMOUNT_OVERFLOW = "AMOUNT_OVERFLOW"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    MALFORMED_ACTION = "MALFORMED_ACTION"

    # Lookups
    UNKNOWN_ACCOUNT = "UNKNOWN_ACCOUNT"
    TOKEN_NOT_FOUND = "TOKEN_NOT_FOUND"
    BALANCE_NOT_FOUND = "BALANCE_NOT_FOUND"
    CREATOR_NOT_FOUND = "CREATOR_NOT_FOUND"

    # Uniqueness
    TOKEN_ALREADY_EXISTS = "TOKEN_ALREADY_EXISTS"
    TOKEN_URI_ALREADY_EXISTS = "TOKEN_URI_ALREADY_EXISTS"
    CREATOR_ALREADY_EXISTS = "CREATOR_ALREADY_EXISTS"

    # Authorization
    MISSING_AUTHORITY = "MISSING_AUTHORITY"
    CREATOR_NOT_AUTHORIZED = "CREATOR_NOT_AUTHORIZED"
    NOTARY_NOT_AUTHORIZED = "NOTARY_NOT_AUTHORIZED"
    ALLOWANCE_NOT_FOUND = "ALLOWANCE_NOT_FOUND"
    ALLOWANCE_EXCEEDED = "ALLOWANCE_EXCEEDED"

    # Funds and supply
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    EXCEEDS_MAX_SUPPLY = "EXCEEDS_MAX_SUPPLY"

    # Policy
    SINGLETON_CAP_EXCEEDED = "SINGLETON_CAP_EXCEEDED"
    TRANSFER_NOT_PERMITTED = "TRANSFER_NOT_PERMITTED"
    DELEGATION_DISABLED = "DELEGATION_DISABLED"


class ValidationResult:

    def __init__(self, is_valid: bool, error_code: str = None, error_message: str = None):
        self.is_valid = is_valid
        self.error_code = error_code
        self.error_message = error_message

    def __bool__(self):
        return self.is_valid

    def __repr__(self):
        if self.is_valid:
            return "ValidationResult(valid=True)"
        return f"ValidationResult(valid=False, error={self.error_code})"


class LedgerException(Exception):

    def __init__(self, error_code: str, message: str):
        self.error_code = error_code
        self.message = message
        super().__init__(f"{error_code}: {message}")


class InvalidArgument(LedgerException):
    """Malformed amount, oversized memo or URI, self-transfer"""


class NotFound(LedgerException):
    """Unknown symbol or account, missing balance row"""


class AlreadyExists(LedgerException):
    """Duplicate symbol id or token URI hash"""


class Unauthorized(LedgerException):
    """Failed caller authorization, policy gate or allowance check"""


class InsufficientFunds(LedgerException):
    """Balance underflow"""


InsufficientBalance = InsufficientFunds


class InsufficientSupply(LedgerException):
    """Issue would exceed max supply"""


class PolicyViolation(LedgerException):
    """Singleton cap exceeded, missing send/recv permission, disabled feature"""


ERROR_CLASSES: Dict[str, Type[LedgerException]] = {
    LedgerErrorCodes.INVALID_AMOUNT: InvalidArgument,
    LedgerErrorCodes.INVALID_SYMBOL: InvalidArgument,
    LedgerErrorCodes.SYMBOL_MISMATCH: InvalidArgument,
    LedgerErrorCodes.MEMO_TOO_LONG: InvalidArgument,
    LedgerErrorCodes.TOKEN_URI_TOO_LONG: InvalidArgument,
    LedgerErrorCodes.SELF_TRANSFER: InvalidArgument,
    LedgerErrorCodes.INVALID_ASSET_COUNT: InvalidArgument,
    LedgerErrorCodes.INVALID_RECIPIENT: InvalidArgument,
    LedgerErrorCodes.AMOUNT_OVERFLOW: InvalidArgument,
    LedgerErrorCodes.UNKNOWN_ACTION: InvalidArgument,
    LedgerErrorCodes.MALFORMED_ACTION: InvalidArgument,
    LedgerErrorCodes.UNKNOWN_ACCOUNT: NotFound,
    LedgerErrorCodes.TOKEN_NOT_FOUND: NotFound,
    LedgerErrorCodes.BALANCE_NOT_FOUND: NotFound,
    LedgerErrorCodes.CREATOR_NOT_FOUND: NotFound,
    LedgerErrorCodes.TOKEN_ALREADY_EXISTS: AlreadyExists,
    LedgerErrorCodes.TOKEN_URI_ALREADY_EXISTS: AlreadyExists,
    LedgerErrorCodes.CREATOR_ALREADY_EXISTS: AlreadyExists,
    LedgerErrorCodes.MISSING_AUTHORITY: Unauthorized,
    LedgerErrorCodes.CREATOR_NOT_AUTHORIZED: Unauthorized,
    LedgerErrorCodes.NOTARY_NOT_AUTHORIZED: Unauthorized,
    LedgerErrorCodes.ALLOWANCE_NOT_FOUND: Unauthorized,
    LedgerErrorCodes.ALLOWANCE_EXCEEDED: Unauthorized,
    LedgerErrorCodes.INSUFFICIENT_BALANCE: InsufficientFunds,
    LedgerErrorCodes.EXCEEDS_MAX_SUPPLY: InsufficientSupply,
    LedgerErrorCodes.SINGLETON_CAP_EXCEEDED: PolicyViolation,
    LedgerErrorCodes.TRANSFER_NOT_PERMITTED: PolicyViolation,
    LedgerErrorCodes.DELEGATION_DISABLED: PolicyViolation,
}


def raise_for_result(result: ValidationResult) -> None:
    """Abort the current operation if ``result`` is a failed validation."""
    if result.is_valid:
        return
    exc_class = ERROR_CLASSES.get(result.error_code, LedgerException)
    raise exc_class(result.error_code, result.error_message)


class ProcessingResult:

    def __init__(
        self,
        action=None,
        is_valid=False,
        error_message=None,
        error_code=None,
        symbol_id=None,
        amount=None,
    ):
        self.action = action
        self.is_valid = is_valid
        self.error_message = error_message
        self.error_code = error_code
        self.symbol_id = symbol_id
        self.amount = amount

    def __repr__(self):
        if self.is_valid:
            return f"ProcessingResult(action={self.action}, valid=True)"
        return f"ProcessingResult(action={self.action}, valid=False, error={self.error_code})"

    def as_dict(self) -> Dict[str, Optional[object]]:
        return {
            "action": self.action,
            "is_valid": self.is_valid,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "symbol_id": self.symbol_id,
            "amount": self.amount,
        }
