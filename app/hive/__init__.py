"""Hive blockchain access."""

from app.hive.client import ContentKind, HiveClient, HiveRPCError
from app.hive.nodes import NodeProvider

__all__ = ["ContentKind", "HiveClient", "HiveRPCError", "NodeProvider"]
