"""
Denial Management API Endpoints.

Provides:
- Denial work queue listing and lookup
- Review, write-off
- Appeal filing and payer decisions
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from revcycle.api.deps import get_service
from revcycle.core.enums import DenialCategory, DenialStatus
from revcycle.schemas.denial import (
    AppealCreate,
    AppealDecisionCreate,
    DenialResponse,
    WriteOffCreate,
)
from revcycle.services.exceptions import RevenueCycleError
from revcycle.services.revenue_cycle_service import RevenueCycleService
from revcycle.utils.errors import http_error_for

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/denials",
    tags=["denials"],
)


@router.get("", response_model=list[DenialResponse])
async def list_denials(
    denial_status: Optional[DenialStatus] = Query(None, alias="status"),
    category: Optional[DenialCategory] = Query(None),
    service: RevenueCycleService = Depends(get_service),
) -> list[DenialResponse]:
    """List denials, most recent first."""
    return [
        DenialResponse.model_validate(d)
        for d in service.list_denials(status=denial_status, category=category)
    ]


@router.get("/{denial_id}", response_model=DenialResponse)
async def get_denial(
    denial_id: str,
    service: RevenueCycleService = Depends(get_service),
) -> DenialResponse:
    try:
        denial = service.get_denial(denial_id)
    except RevenueCycleError as e:
        raise http_error_for(e)
    return DenialResponse.model_validate(denial)


@router.post("/{denial_id}/review", response_model=DenialResponse)
async def start_review(
    denial_id: str,
    assigned_to: Optional[str] = Query(None),
    service: RevenueCycleService = Depends(get_service),
) -> DenialResponse:
    try:
        denial = service.start_review(denial_id, assigned_to=assigned_to)
    except RevenueCycleError as e:
        raise http_error_for(e)
    return DenialResponse.model_validate(denial)


@router.post("/{denial_id}/write-off", response_model=DenialResponse)
async def write_off_denial(
    denial_id: str,
    write_off: WriteOffCreate,
    service: RevenueCycleService = Depends(get_service),
) -> DenialResponse:
    try:
        denial = service.write_off_denial(
            denial_id, amount=write_off.amount, notes=write_off.notes
        )
    except RevenueCycleError as e:
        raise http_error_for(e)
    return DenialResponse.model_validate(denial)


# =============================================================================
# Appeals
# =============================================================================


@router.post(
    "/{denial_id}/appeals",
    response_model=DenialResponse,
    status_code=status.HTTP_201_CREATED,
)
async def file_appeal(
    denial_id: str,
    appeal: AppealCreate,
    service: RevenueCycleService = Depends(get_service),
) -> DenialResponse:
    """File an appeal; the parent claim moves to APPEALED."""
    try:
        denial = await service.file_appeal(
            denial_id, appeal.level, appeal.supporting_docs, appeal.reason
        )
    except RevenueCycleError as e:
        raise http_error_for(e)
    return DenialResponse.model_validate(denial)


@router.post(
    "/{denial_id}/appeals/{appeal_id}/decision",
    response_model=DenialResponse,
)
async def record_appeal_decision(
    denial_id: str,
    appeal_id: str,
    decision: AppealDecisionCreate,
    service: RevenueCycleService = Depends(get_service),
) -> DenialResponse:
    try:
        denial = await service.record_appeal_decision(
            denial_id, appeal_id, decision.decision, decision.details
        )
    except RevenueCycleError as e:
        raise http_error_for(e)
    return DenialResponse.model_validate(denial)
