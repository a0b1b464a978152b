"""Protocol interfaces for the yield rotator."""
from .wallet import WalletClient
from .yield_source import YieldSource

__all__ = ["WalletClient", "YieldSource"]
