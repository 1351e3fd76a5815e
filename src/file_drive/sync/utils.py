"""Types for recording the outcome of durable writes."""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

MAX_RECENT_OUTCOMES = 100


class SyncAction(str, Enum):
    PUT = "put"
    DELETE = "delete"


class OutcomeStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    SKIPPED = "skipped"  # store was unavailable, nothing written


class SyncOutcome(BaseModel):
    timestamp: datetime
    key: str
    action: SyncAction
    status: OutcomeStatus
    error: Optional[str] = None


class SyncState(BaseModel):
    """Counters and recent history of durable writes for one session."""

    write_count: int = 0
    error_count: int = 0
    last_error: Optional[datetime] = None
    recent_outcomes: List[SyncOutcome] = Field(default_factory=list)

    def record(
        self,
        key: str,
        action: SyncAction,
        status: OutcomeStatus,
        error: Optional[str] = None,
    ) -> SyncOutcome:
        outcome = SyncOutcome(
            timestamp=datetime.now(),
            key=key,
            action=action,
            status=status,
            error=error,
        )
        self.recent_outcomes.insert(0, outcome)
        self.recent_outcomes = self.recent_outcomes[:MAX_RECENT_OUTCOMES]

        if status == OutcomeStatus.SUCCESS:
            self.write_count += 1
        elif status == OutcomeStatus.ERROR:
            self.error_count += 1
            self.last_error = outcome.timestamp
        return outcome

    def failures(self) -> List[SyncOutcome]:
        return [o for o in self.recent_outcomes if o.status == OutcomeStatus.ERROR]
