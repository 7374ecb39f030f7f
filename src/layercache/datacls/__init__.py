from .entries import CacheResult, LayerEntry, MISS
from .contexts import CallContext

__all__ = [
    'CacheResult',
    'LayerEntry',
    'MISS',
    'CallContext',
]
