from .durable import DurableIndexStore, StagedTransaction
from .ephemeral import EphemeralCache

__all__ = [
    "DurableIndexStore",
    "StagedTransaction",
    "EphemeralCache",
]
