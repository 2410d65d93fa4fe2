"""
Safe amount handling utilities for ledger operations.
Amounts are signed 64-bit integers; arithmetic that leaves that range raises.
"""

MAX_AMOUNT = 2**63 - 1


def is_integer_amount(amount) -> bool:
    return isinstance(amount, int) and not isinstance(amount, bool)


def is_valid_amount(amount) -> bool:
    """Validate that amount is a positive integer within int64 range"""
    if not is_integer_amount(amount):
        return False
    return 0 < amount <= MAX_AMOUNT


def is_non_negative_amount(amount) -> bool:
    if not is_integer_amount(amount):
        return False
    return 0 <= amount <= MAX_AMOUNT


def add_amounts(a: int, b: int) -> int:
    """Safely add two amounts

    Raises:
        ValueError: If amounts are invalid or the sum overflows int64
    """
    if not is_non_negative_amount(a):
        raise ValueError(f"Invalid amount: {a}")
    if not is_non_negative_amount(b):
        raise ValueError(f"Invalid amount: {b}")

    result = a + b
    if result > MAX_AMOUNT:
        raise ValueError(f"Amount overflow: {a} + {b}")
    return result


def subtract_amounts(a: int, b: int) -> int:
    """Safely subtract two amounts

    Raises:
        ValueError: If amounts are invalid or result is negative
    """
    if not is_non_negative_amount(a):
        raise ValueError(f"Invalid amount: {a}")
    if not is_non_negative_amount(b):
        raise ValueError(f"Invalid amount: {b}")

    if a < b:
        raise ValueError(f"Insufficient amount: {a} - {b} would be negative")

    return a - b


def compare_amounts(a: int, b: int) -> int:
    if a < b:
        return -1
    elif a > b:
        return 1
    else:
        return 0


def is_amount_greater_than(a: int, b: int) -> bool:
    """Check if amount a > b"""
    return compare_amounts(a, b) > 0
