"""
Data access layer (Repository pattern).

Repositories handle all database queries,
isolating business logic from SQL.
"""

from nextcut.repositories import barber_directory, history, queue_store

__all__ = ["barber_directory", "history", "queue_store"]
