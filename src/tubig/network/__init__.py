from .supply_network import SupplyNetwork
from .validation import DuplicateIdError, EmptyInputError, ValidationError

__all__ = [
    "DuplicateIdError",
    "EmptyInputError",
    "SupplyNetwork",
    "ValidationError",
]
