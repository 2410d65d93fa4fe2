from .base import Base
from .token_stats import TokenStats
from .balance import Balance
from .allowance import Allowance
from .global_state import GlobalStateRow

__all__ = [
    "Base",
    "TokenStats",
    "Balance",
    "Allowance",
    "GlobalStateRow",
]
