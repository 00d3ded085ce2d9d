from .memory_store import InMemoryEventStore

__all__ = [
    'InMemoryEventStore'
]
