"""DownloadRequest status state machine.

State Flow:
    PENDING → APPROVED | REJECTED

Both decisions are terminal. Expiry of an approval is not a state: the row
stays APPROVED and the grant is checked against expires_at at read time.
"""

from enum import Enum
from typing import List


class RequestStatus(str, Enum):
    """Download request status enumeration.

    Values are stored as TEXT in the database and must match exactly.
    """
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


ALLOWED_TRANSITIONS = {
    RequestStatus.PENDING: [RequestStatus.APPROVED, RequestStatus.REJECTED],
    RequestStatus.APPROVED: [],  # Terminal state
    RequestStatus.REJECTED: [],  # Terminal state
}


def get_source_states(target: RequestStatus) -> List[RequestStatus]:
    """Statuses a request must be in to move to target."""
    return [status for status, targets in ALLOWED_TRANSITIONS.items() if target in targets]
