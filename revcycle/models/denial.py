"""
Denial management and appeal models.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional

from revcycle.core.enums import (
    AppealDecision,
    AppealLevel,
    AppealStatus,
    DenialCategory,
    DenialStatus,
    ResolutionType,
)


@dataclass(frozen=True)
class AppealResponse:
    received_date: datetime
    decision: AppealDecision
    details: str = ""


@dataclass
class Appeal:
    id: str
    level: AppealLevel
    filed_date: datetime
    deadline: datetime
    reason: str
    supporting_docs: tuple[str, ...] = ()
    status: AppealStatus = AppealStatus.PENDING
    response: Optional[AppealResponse] = None

    @property
    def is_open(self) -> bool:
        return self.status in (AppealStatus.PENDING, AppealStatus.IN_REVIEW)


@dataclass(frozen=True)
class DenialResolution:
    type: ResolutionType
    date: datetime
    amount: Optional[Decimal] = None
    notes: Optional[str] = None


@dataclass
class DenialManagement:
    """One denial work item per denied claim posting."""

    id: str
    claim_id: str
    claim_number: str
    denial_date: datetime
    denial_codes: tuple[str, ...]
    denial_reasons: tuple[str, ...]
    category: DenialCategory
    appeal_deadline: datetime
    status: DenialStatus = DenialStatus.NEW
    assigned_to: Optional[str] = None
    resolution: Optional[DenialResolution] = None
    appeals: list[Appeal] = field(default_factory=list)

    @property
    def is_closed(self) -> bool:
        return self.status in (DenialStatus.RESOLVED, DenialStatus.WRITTEN_OFF)

    def open_appeal(self, level: Optional[AppealLevel] = None) -> Optional[Appeal]:
        """Return the open appeal (optionally at a given level)."""
        for appeal in self.appeals:
            if appeal.is_open and (level is None or appeal.level == level):
                return appeal
        return None

    def get_appeal(self, appeal_id: str) -> Optional[Appeal]:
        for appeal in self.appeals:
            if appeal.id == appeal_id:
                return appeal
        return None
