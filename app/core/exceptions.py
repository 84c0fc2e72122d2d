"""Domain exceptions raised by the billing engine."""


class BillingError(Exception):
    """Base class for billing calculation failures."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidBillingInput(BillingError):
    """Raised when a billing request cannot be calculated as given.

    Covers negative rates, unknown rental types, readings for the wrong room
    and periods whose current reading precedes the previous one.
    """
