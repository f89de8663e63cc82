"""
Domain errors for WheelBench.

Everything raised by the core derives from WheelBenchError so the API layer
can translate failures in one place.
"""


class WheelBenchError(Exception):
    """Base class for all domain errors."""


class InvalidPriceError(WheelBenchError, ValueError):
    """A benchmark price (current or lump-sum) is non-positive or unavailable."""


class PriceUnavailableError(InvalidPriceError):
    """The price source could not produce a close for the requested ticker/date."""


class NoDepositsError(WheelBenchError, ValueError):
    """A comparison was requested for an empty deposit history."""

    def __init__(self, message: str = "No deposits to compare"):
        super().__init__(message)


class InvalidDepositError(WheelBenchError, ValueError):
    """A deposit or withdrawal request failed validation."""


class WithdrawalExceedsCapitalError(InvalidDepositError):
    """A withdrawal asks for more than the user's net invested capital."""


class DepositNotFoundError(WheelBenchError, LookupError):
    """No deposit with the given id exists for the user."""
