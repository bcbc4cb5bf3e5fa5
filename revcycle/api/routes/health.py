"""
Health Check Routes
Liveness and work-queue status for the revenue cycle API
"""

from typing import Any

from fastapi import APIRouter, Depends

from revcycle import __version__
from revcycle.api.deps import get_service
from revcycle.core.enums import DenialStatus, RemittanceStatus
from revcycle.services.revenue_cycle_service import RevenueCycleService
from revcycle.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])

SERVICE_NAME = "revcycle-api"


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """Liveness probe for load balancers."""
    return {
        "status": "healthy",
        "service": SERVICE_NAME,
        "version": __version__,
    }


@router.get("/health/detailed")
async def detailed_health_check(
    service: RevenueCycleService = Depends(get_service),
) -> dict[str, Any]:
    """
    Liveness plus the size of the manual follow-up queues.

    A remittance in exception status or a new denial still needs a person;
    either one degrades the reported status.
    """
    store = service.store
    remittance_exceptions = sum(
        1 for r in store.list_remittances() if r.status == RemittanceStatus.EXCEPTION
    )
    new_denials = sum(1 for d in store.list_denials() if d.status == DenialStatus.NEW)

    overall_status = "healthy" if not (remittance_exceptions or new_denials) else "degraded"
    if overall_status == "degraded":
        logger.info(
            f"Follow-up pending: {remittance_exceptions} remittance exceptions, "
            f"{new_denials} new denials"
        )

    return {
        "status": overall_status,
        "service": SERVICE_NAME,
        "version": __version__,
        "checks": {
            "claims": len(store.list_claims()),
            "remittance_exceptions": remittance_exceptions,
            "new_denials": new_denials,
        },
    }
