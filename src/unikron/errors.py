"""Error taxonomy for swap quoting and execution.

Every error carries a short machine-readable ``code`` and a message that
is safe to show to the user as-is.
"""

from typing import Optional


class SwapError(Exception):
    """Base class for all swap related failures."""

    code = "swap_error"

    def __init__(self, message: str, tx_hash: Optional[str] = None):
        self.message = message
        self.tx_hash = tx_hash
        super().__init__(message)


class ValidationError(SwapError):
    """Malformed or missing swap inputs, detected before any I/O."""

    code = "validation_error"


class UnsupportedPairError(SwapError):
    """The aggregator cannot route between the selected tokens."""

    code = "unsupported_pair"

    def __init__(self, message: str = "pair not supported"):
        super().__init__(message)


class InsufficientBalanceError(SwapError):
    """Wallet balance is below the requested input amount."""

    code = "insufficient_balance"

    def __init__(self, message: str = "insufficient balance"):
        super().__init__(message)


class RemoteQuoteError(SwapError):
    """Aggregator quote/build call failed (transport, non-2xx, malformed body)."""

    code = "remote_quote_error"

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class AggregatorTimeoutError(RemoteQuoteError):
    """Aggregator call exceeded its deadline."""

    code = "timeout"


class WalletError(SwapError):
    """Wallet collaborator failed or is unreachable."""

    code = "wallet_error"


class WalletRejectionError(WalletError):
    """User declined a signature or approval in their wallet."""

    code = "user_rejected"

    def __init__(self, message: str = "user rejected"):
        super().__init__(message)


class ApprovalRevertError(SwapError):
    """Approval transaction was mined but failed."""

    code = "approval_reverted"

    def __init__(self, message: str = "approval failed", tx_hash: Optional[str] = None):
        super().__init__(message, tx_hash=tx_hash)


class SwapRevertError(SwapError):
    """Swap transaction was mined but failed."""

    code = "transaction_reverted"

    def __init__(self, message: str = "transaction reverted", tx_hash: Optional[str] = None):
        super().__init__(message, tx_hash=tx_hash)


class SwapInProgressError(SwapError):
    """Another swap is already running in this session."""

    code = "swap_in_progress"

    def __init__(self, message: str = "a swap is already in progress"):
        super().__init__(message)


class WalletStateInvalidatedError(SwapError):
    """Account or chain changed in the wallet while a swap was running."""

    code = "wallet_invalidated"

    def __init__(self, message: str = "user abandoned"):
        super().__init__(message)


class TrackerBusyError(RuntimeError):
    """Raised when a new record would replace a still pending transaction."""

    pass
