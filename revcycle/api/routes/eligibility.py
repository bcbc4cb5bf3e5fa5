"""
Eligibility Verification API Endpoints.
"""

import logging

from fastapi import APIRouter, Depends

from revcycle.api.deps import get_service
from revcycle.schemas.eligibility import Eligibility, EligibilityRequest
from revcycle.services.exceptions import PayerNotFoundError
from revcycle.services.revenue_cycle_service import RevenueCycleService
from revcycle.utils.errors import NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/eligibility",
    tags=["eligibility"],
)


@router.post("", response_model=Eligibility)
async def check_eligibility(
    request: EligibilityRequest,
    service: RevenueCycleService = Depends(get_service),
) -> Eligibility:
    """Verify a patient's coverage with the payer for a date of service."""
    try:
        return await service.check_eligibility(request)
    except PayerNotFoundError as e:
        raise NotFoundError(str(e))
