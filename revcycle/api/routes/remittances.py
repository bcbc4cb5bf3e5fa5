"""
Remittance API Endpoints.

Provides:
- Remittance advice posting
- Remittance lookup
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from revcycle.api.deps import get_service
from revcycle.schemas.remittance import RemittanceCreate, RemittanceResponse
from revcycle.services.exceptions import PayerNotFoundError, RemittanceNotFoundError
from revcycle.services.revenue_cycle_service import RevenueCycleService
from revcycle.utils.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/remittances",
    tags=["remittances"],
)


@router.post(
    "",
    response_model=RemittanceResponse,
    status_code=status.HTTP_201_CREATED,
)
async def process_remittance(
    remittance: RemittanceCreate,
    service: RevenueCycleService = Depends(get_service),
) -> RemittanceResponse:
    """
    Post a remittance batch.

    Lines that cannot be applied are listed under `exceptions` and the batch
    status is `exception`; the other lines are still posted.
    """
    try:
        advice = await service.process_remittance(remittance)
    except PayerNotFoundError as e:
        raise NotFoundError(str(e))
    return RemittanceResponse.model_validate(advice)


@router.get("", response_model=list[RemittanceResponse])
async def list_remittances(
    payer_id: Optional[str] = Query(None),
    service: RevenueCycleService = Depends(get_service),
) -> list[RemittanceResponse]:
    return [
        RemittanceResponse.model_validate(r)
        for r in service.list_remittances(payer_id=payer_id)
    ]


@router.get("/{remittance_id}", response_model=RemittanceResponse)
async def get_remittance(
    remittance_id: str,
    service: RevenueCycleService = Depends(get_service),
) -> RemittanceResponse:
    try:
        advice = service.get_remittance(remittance_id)
    except RemittanceNotFoundError as e:
        raise NotFoundError(str(e))
    return RemittanceResponse.model_validate(advice)
