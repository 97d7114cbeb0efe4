"""
Data access for domain versions

Repository organization:
- store.py: DataStore interface and the in-memory store
- base.py: Base repository class with common read operations
- domain_repository.py: Stored domain versions and the database-backed store
"""

from .store import DataStore, InMemoryDataStore
from .base import BaseRepository
from .domain_repository import DomainRepository, DatabaseDataStore

# Export all repositories
__all__ = [
    'DataStore',
    'InMemoryDataStore',
    'BaseRepository',
    'DomainRepository',
    'DatabaseDataStore'
]
