"""
Per-item outcome of a batch operation.

Batch operations over a selection of events are best-effort: each event is
handled in its own transaction and one failure never undoes another. The
caller gets a BatchResult telling exactly which GUIDs succeeded and why the
others failed.
"""

import enum
from dataclasses import dataclass, field
from typing import Dict, List


class BatchOutcome(str, enum.Enum):
    """Overall result of a batch."""
    SUCCESS = "success"
    PARTIAL_FAILURE = "partial_failure"


@dataclass
class BatchResult:
    """
    Collected per-GUID results of a batch operation.

    Attributes:
        action: Name of the operation (publish, delete, ...)
        succeeded: GUIDs processed successfully, in input order
        failed: GUID -> error message for every failed item
    """

    action: str
    succeeded: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    def record_success(self, guid: str) -> None:
        self.succeeded.append(guid)

    def record_failure(self, guid: str, error: Exception) -> None:
        self.failed[guid] = str(error)

    @property
    def is_complete(self) -> bool:
        """True when every item succeeded."""
        return not self.failed

    @property
    def outcome(self) -> BatchOutcome:
        return BatchOutcome.SUCCESS if self.is_complete else BatchOutcome.PARTIAL_FAILURE

    @property
    def results(self) -> Dict[str, str]:
        """GUID -> "ok" or the error message, for every processed GUID."""
        results = {guid: "ok" for guid in self.succeeded}
        results.update(self.failed)
        return results
