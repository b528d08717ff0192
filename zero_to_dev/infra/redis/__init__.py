"""Redis infrastructure: client factory, ping."""

from .client import create_redis, ping_redis, verify_connection

__all__ = ["create_redis", "ping_redis", "verify_connection"]
