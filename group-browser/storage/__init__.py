"""Group Browser - Storage Module.

Read-only access to the tables written by the import pipeline and the
status snapshot job.

The storage layer is organized as follows:
- models.py: Record dataclasses and the effective title rule
- schema.py: Database schema
- repositories/: Specialized repository classes for each entity type
- sqlite_store.py: GroupStore facade owning the repositories

Example:
    >>> from storage import GroupStore
    >>>
    >>> store = GroupStore()
    >>> await store.initialize()
    >>> low, high = await store.groups.member_count_bounds("tenant-1")
"""

from .models import (
    UNCLUSTERED,
    ClusterGroup,
    CreativeRecord,
    DateRange,
    GroupStatusSnapshot,
    MediaType,
    Tenant,
    effective_title,
)
from .repositories import (
    BaseRepository,
    ClusterAggregate,
    CreativeRepository,
    GroupRepository,
    StatusRepository,
    StorageError,
    TenantRepository,
)
from .schema import SCHEMA
from .sqlite_store import DEFAULT_DB_PATH, GroupStore

__all__ = [
    # Facade
    "GroupStore",
    "DEFAULT_DB_PATH",
    # Models
    "UNCLUSTERED",
    "ClusterGroup",
    "CreativeRecord",
    "DateRange",
    "GroupStatusSnapshot",
    "MediaType",
    "Tenant",
    "effective_title",
    # Schema
    "SCHEMA",
    # Repositories
    "BaseRepository",
    "ClusterAggregate",
    "CreativeRepository",
    "GroupRepository",
    "StatusRepository",
    "StorageError",
    "TenantRepository",
]
