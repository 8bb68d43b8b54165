"""
Adapters layer - Data sources feeding the availability service.
"""

from .snapshot_repository import InMemoryAvailabilityRepository, SalonSnapshot, load_snapshot

__all__ = ["InMemoryAvailabilityRepository", "SalonSnapshot", "load_snapshot"]
