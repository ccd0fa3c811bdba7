from .interfaces import PaymentGateway, SchedulingStore
from .memory_store import InMemorySchedulingStore

__all__ = ["InMemorySchedulingStore", "PaymentGateway", "SchedulingStore"]
