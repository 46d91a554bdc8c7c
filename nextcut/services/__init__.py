"""
Services Package
================

Business logic layer for NextCut.

Available services:
- QueueEngine: join/leave/remove transitions and position queries
- DirectoryService: barber lookup and proximity search
- RegistryService: barber and customer sign-up
- estimate_wait_minutes: the wait-time policy
"""

from nextcut.services.directory import DirectoryService, get_directory_service
from nextcut.services.estimator import estimate_for_new_arrival, estimate_wait_minutes
from nextcut.services.queue_engine import QueueEngine, get_queue_engine
from nextcut.services.registry import RegistryService, get_registry_service

__all__ = [
    "DirectoryService",
    "QueueEngine",
    "RegistryService",
    "estimate_for_new_arrival",
    "estimate_wait_minutes",
    "get_directory_service",
    "get_queue_engine",
    "get_registry_service",
]
