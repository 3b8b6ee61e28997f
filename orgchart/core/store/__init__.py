"""
Node stores and the member directory.

Usage:
    from orgchart.core.store import get_node_store

    store = get_node_store()
    nodes = await store.list_by_org(org_id)
"""

import logging
from functools import lru_cache

from orgchart.app.config import get_settings
from orgchart.core.store.base import NodeStore
from orgchart.core.store.memory import InMemoryNodeStore
from orgchart.core.store.sqlite import SqliteNodeStore
from orgchart.core.store.member_directory import InMemoryMemberDirectory

logger = logging.getLogger(__name__)


@lru_cache()
def get_node_store() -> NodeStore:
    """Build the configured node store once per process."""
    settings = get_settings()
    if settings.node_store_backend == "sqlite":
        logger.info(f"Using SQLite node store at {settings.sqlite_path}")
        return SqliteNodeStore(settings.sqlite_path)
    logger.info("Using in-memory node store")
    return InMemoryNodeStore()


@lru_cache()
def get_member_directory() -> InMemoryMemberDirectory:
    """Process-wide member directory."""
    return InMemoryMemberDirectory()


__all__ = [
    "NodeStore",
    "InMemoryNodeStore",
    "SqliteNodeStore",
    "InMemoryMemberDirectory",
    "get_node_store",
    "get_member_directory",
]
