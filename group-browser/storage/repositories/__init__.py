"""Repository classes for Group Browser storage.

This package provides repository classes that encapsulate database reads
for specific entity types.
"""

from .base import BaseRepository, StorageError
from .creative_repository import ClusterAggregate, CreativeRepository
from .group_repository import ORDERINGS, GroupRepository
from .status_repository import StatusRepository
from .tenant_repository import TenantRepository

__all__ = [
    "BaseRepository",
    "StorageError",
    "ClusterAggregate",
    "CreativeRepository",
    "ORDERINGS",
    "GroupRepository",
    "StatusRepository",
    "TenantRepository",
]
