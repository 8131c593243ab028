"""Persistence adapters"""

from src.repositories.base import ProgressRepository, RepositoryError
from src.repositories.memory import InMemoryProgressRepository
from src.repositories.sql import SqlProgressRepository

__all__ = [
    "ProgressRepository",
    "RepositoryError",
    "InMemoryProgressRepository",
    "SqlProgressRepository",
]
