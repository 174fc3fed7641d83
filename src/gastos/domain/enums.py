from enum import Enum

class Currency(Enum):
    """Currency an expense was charged in"""
    PEN = "PEN" # local
    USD = "USD" # foreign

    @property
    def is_local(self) -> bool:
        return self is Currency.PEN


class Bank(Enum):
    """Issuing institution of the statement. Descriptive only."""
    BCP = "BCP"
    INTERBANK = "Interbank"
    BBVA = "BBVA"
    SCOTIABANK = "Scotiabank"
    OTHER = "Otro"
