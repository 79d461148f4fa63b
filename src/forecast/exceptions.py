"""Errors raised by the payout forecast engine."""


class ForecastError(Exception):
    """Base class for forecast errors; the message is returned to the caller."""


class AuthenticationError(ForecastError):
    """The request carried no valid bearer token, or the user has no profile."""


class NoEligibleAccountsError(ForecastError):
    """No account of the user is active and ready for forecasting."""


class InsufficientHistoryError(ForecastError):
    """An account has too few qualifying transactions in the recent window."""

    def __init__(self, amazon_account_id: str, found: int, required: int):
        self.amazon_account_id = amazon_account_id
        self.found = found
        self.required = required
        super().__init__(
            f"Account {amazon_account_id} has {found} qualifying transactions, "
            f"{required} required"
        )


class ForecastStoreError(ForecastError):
    """Deleting or writing forecast rows failed."""
