"""
Claims API Endpoints.

Provides:
- Claim creation and lookup
- Validation and submission
- Clearinghouse acknowledgment and void
- Claim notes
"""

import logging
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status

from revcycle.api.deps import get_service
from revcycle.core.enums import ClaimStatus
from revcycle.schemas.claim import (
    AcknowledgementCreate,
    ClaimCreate,
    ClaimListFilters,
    ClaimListResponse,
    ClaimNoteResponse,
    ClaimResponse,
    NoteCreate,
    ValidationResponse,
    VoidRequest,
)
from revcycle.services.exceptions import (
    ClaimNotFoundError,
    PayerNotFoundError,
    PreconditionFailedError,
)
from revcycle.services.revenue_cycle_service import RevenueCycleService
from revcycle.utils.errors import ConflictError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/claims",
    tags=["claims"],
)


# =============================================================================
# CRUD Endpoints
# =============================================================================


@router.post(
    "",
    response_model=ClaimResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_claim(
    claim_data: ClaimCreate,
    service: RevenueCycleService = Depends(get_service),
) -> ClaimResponse:
    """Create a new claim in DRAFT status."""
    try:
        claim = service.create_claim(claim_data)
    except PayerNotFoundError as e:
        raise NotFoundError(str(e))
    return ClaimResponse.model_validate(claim)


@router.get("", response_model=ClaimListResponse)
async def list_claims(
    patient_id: Optional[str] = Query(None),
    payer_id: Optional[str] = Query(None),
    provider_id: Optional[str] = Query(None),
    claim_status: Optional[ClaimStatus] = Query(None, alias="status"),
    from_date: Optional[date] = Query(None),
    to_date: Optional[date] = Query(None),
    offset: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1),
    service: RevenueCycleService = Depends(get_service),
) -> ClaimListResponse:
    """List claims, newest first."""
    filters = ClaimListFilters(
        patient_id=patient_id,
        payer_id=payer_id,
        provider_id=provider_id,
        status=claim_status,
        from_date=from_date,
        to_date=to_date,
        offset=offset,
        limit=limit,
    )
    claims, total = service.list_claims(filters)
    return ClaimListResponse(
        claims=[ClaimResponse.model_validate(c) for c in claims],
        total=total,
        offset=offset,
        limit=service.page_limit(limit),
    )


@router.get("/{claim_id}", response_model=ClaimResponse)
async def get_claim(
    claim_id: str,
    service: RevenueCycleService = Depends(get_service),
) -> ClaimResponse:
    try:
        claim = service.get_claim(claim_id)
    except ClaimNotFoundError as e:
        raise NotFoundError(str(e))
    return ClaimResponse.model_validate(claim)


# =============================================================================
# Workflow Endpoints
# =============================================================================


@router.post("/{claim_id}/validate", response_model=ValidationResponse)
async def validate_claim(
    claim_id: str,
    service: RevenueCycleService = Depends(get_service),
) -> ValidationResponse:
    """
    Validate a claim.

    A claim with no errors in DRAFT status moves to READY. Validation issues
    are returned in the body with a 200 status.
    """
    try:
        result = await service.validate_claim(claim_id)
    except ClaimNotFoundError as e:
        raise NotFoundError(str(e))
    return ValidationResponse.model_validate(result)


@router.post("/{claim_id}/submit", response_model=ClaimResponse)
async def submit_claim(
    claim_id: str,
    service: RevenueCycleService = Depends(get_service),
) -> ClaimResponse:
    try:
        claim = await service.submit_claim(claim_id)
    except ClaimNotFoundError as e:
        raise NotFoundError(str(e))
    except PreconditionFailedError as e:
        raise ConflictError(str(e))
    return ClaimResponse.model_validate(claim)


@router.post("/{claim_id}/acknowledge", response_model=ClaimResponse)
async def acknowledge_claim(
    claim_id: str,
    acknowledgement: AcknowledgementCreate,
    service: RevenueCycleService = Depends(get_service),
) -> ClaimResponse:
    """Record the clearinghouse acknowledgment for a submitted claim."""
    try:
        claim = await service.acknowledge_claim(claim_id, acknowledgement)
    except ClaimNotFoundError as e:
        raise NotFoundError(str(e))
    except PreconditionFailedError as e:
        raise ConflictError(str(e))
    return ClaimResponse.model_validate(claim)


@router.post("/{claim_id}/void", response_model=ClaimResponse)
async def void_claim(
    claim_id: str,
    request: VoidRequest,
    service: RevenueCycleService = Depends(get_service),
) -> ClaimResponse:
    try:
        claim = await service.void_claim(claim_id, request.reason)
    except ClaimNotFoundError as e:
        raise NotFoundError(str(e))
    except PreconditionFailedError as e:
        raise ConflictError(str(e))
    return ClaimResponse.model_validate(claim)


@router.post(
    "/{claim_id}/notes",
    response_model=ClaimNoteResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_note(
    claim_id: str,
    note: NoteCreate,
    service: RevenueCycleService = Depends(get_service),
) -> ClaimNoteResponse:
    try:
        created = await service.add_note(claim_id, note)
    except ClaimNotFoundError as e:
        raise NotFoundError(str(e))
    return ClaimNoteResponse.model_validate(created)
