"""DeFiLlama yield catalog."""
from .client import DefiLlamaClient, YieldFeedError

__all__ = ["DefiLlamaClient", "YieldFeedError"]
