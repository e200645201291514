"""Repository adapters - Database and in-memory implementations."""

from .memory import InMemoryMatchStore
from .postgres import PostgresMatchStore, run_migrations

__all__ = ["InMemoryMatchStore", "PostgresMatchStore", "run_migrations"]
