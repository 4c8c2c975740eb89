from dataclasses import dataclass
from enum import Enum
from typing import Optional

from prwarden.models.review_record import ReviewRecord


class GateDecision(Enum):
    ADMIT = "admit"
    SKIP_ALREADY_REVIEWED = "skip_already_reviewed"
    SKIP_DRAFT = "skip_draft"
    SKIP_IRRELEVANT_ACTION = "skip_irrelevant_action"
    SKIP_IN_PROGRESS = "skip_in_progress"


@dataclass
class GateResult:
    decision: GateDecision
    record: Optional[ReviewRecord] = None
    reason: str = ""

    @property
    def admitted(self) -> bool:
        return self.decision == GateDecision.ADMIT
