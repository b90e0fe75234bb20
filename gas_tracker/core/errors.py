"""Error taxonomy for ledger sync runs"""


class GasTrackerError(Exception):
    """Base class for all gas tracker errors"""


class SyncError(GasTrackerError):
    """A lifetime sync run failed; nothing was written to the cache"""


class NetworkError(SyncError):
    """Ledger endpoint returned a non-success response or was unreachable"""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class ShapeError(SyncError):
    """Ledger response is not the expected paginated structure"""


class ParseError(GasTrackerError):
    """A single record field could not be converted to an integer"""


class CooldownActiveError(GasTrackerError):
    """Manual re-sync requested while the cooldown is still running"""

    def __init__(self, address: str, remaining_ms: int):
        super().__init__(
            f"Cooldown active for {address}: {remaining_ms / 1000:.1f}s remaining"
        )
        self.address = address
        self.remaining_ms = remaining_ms
