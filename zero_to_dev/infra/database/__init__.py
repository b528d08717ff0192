"""Database infrastructure: SQLModel engine, health_checks table."""

from .engine import create_db_engine, ping_database, verify_database
from .models import HealthCheckDB
from .repositories import HealthCheckRepository

__all__ = [
    "create_db_engine",
    "ping_database",
    "verify_database",
    "HealthCheckDB",
    "HealthCheckRepository",
]
