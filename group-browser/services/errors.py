"""Error taxonomy for group queries.

Callers decide retry eligibility from the retryable flag; the query layer
itself never retries.
"""

from typing import Optional


class GroupQueryError(Exception):
    """Base class for all group query failures."""

    retryable = False


class InvalidFilter(GroupQueryError):
    """Malformed filter, pagination or sort input. Raised before any I/O."""

    def __init__(self, message: str, field: Optional[str] = None) -> None:
        super().__init__(message)
        self.field = field


class TenantNotFound(GroupQueryError):
    """The requested business scope does not exist."""

    def __init__(self, tenant_id: str) -> None:
        super().__init__(f"Tenant not found: {tenant_id}")
        self.tenant_id = tenant_id


class UpstreamUnavailable(GroupQueryError):
    """The underlying store failed or timed out."""

    retryable = True


class DanglingReference(GroupQueryError):
    """A group points at a representative or member that is missing."""

    def __init__(self, tenant_id: str, cluster_id: int, reference: Optional[str]) -> None:
        super().__init__(
            f"Group {cluster_id} of tenant {tenant_id} references missing creative {reference}"
        )
        self.tenant_id = tenant_id
        self.cluster_id = cluster_id
        self.reference = reference


class Cancelled(GroupQueryError):
    """The caller's deadline passed or the request was cancelled."""

    pass
