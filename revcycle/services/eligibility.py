"""
Eligibility Verification Service.

Shapes eligibility inquiries and responses around an external payer
collaborator:
- Resolve the payer from the reference catalog
- Ask the gateway for the member's coverage on the date of service
- Stamp the answer with payer name, check id and check time
"""

import logging
from abc import ABC, abstractmethod
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, Optional
from uuid import uuid4

from revcycle.core.enums import CoverageLevel, CoverageStatus, EligibilitySource, NetworkStatus
from revcycle.models.claim import utc_now
from revcycle.schemas.eligibility import (
    AccumulatorDetail,
    BenefitDetail,
    CoverageInfo,
    Eligibility,
    EligibilityRequest,
)
from revcycle.services.reference_catalog import Payer, ReferenceCatalog, get_reference_catalog

logger = logging.getLogger(__name__)


class EligibilityGateway(ABC):
    """Payer eligibility collaborator (real-time 270/271 or equivalent)."""

    @abstractmethod
    async def fetch_coverage(self, request: EligibilityRequest, payer: Payer) -> CoverageInfo:
        """Return the member's coverage for the request's date of service."""
        pass


class DemoEligibilityGateway(EligibilityGateway):
    """
    Gateway returning a fixed active coverage.

    Used in development and tests where no payer connection exists.
    """

    def __init__(self, effective_date: date = date(2024, 1, 1)):
        self.effective_date = effective_date

    async def fetch_coverage(self, request: EligibilityRequest, payer: Payer) -> CoverageInfo:
        return CoverageInfo(
            subscriber_name="Primary Subscriber",
            coverage_status=CoverageStatus.ACTIVE,
            effective_date=self.effective_date,
            plan_type="General Scheme",
            plan_name="Standard Coverage",
            source=EligibilitySource.REALTIME,
            benefits=[
                BenefitDetail(
                    category="Consultations",
                    network_status=NetworkStatus.IN_NETWORK,
                    coverage_level=CoverageLevel.INDIVIDUAL,
                    deductible=AccumulatorDetail(
                        total=Decimal("150"), met=Decimal("150"), remaining=Decimal("0")
                    ),
                    copay=Decimal("25"),
                    coinsurance=Decimal("0.20"),
                ),
                BenefitDetail(
                    category="Hospitalisation",
                    network_status=NetworkStatus.IN_NETWORK,
                    coverage_level=CoverageLevel.INDIVIDUAL,
                    deductible=AccumulatorDetail(
                        total=Decimal("500"), met=Decimal("300"), remaining=Decimal("200")
                    ),
                    out_of_pocket_max=AccumulatorDetail(
                        total=Decimal("3000"), met=Decimal("800"), remaining=Decimal("2200")
                    ),
                    coinsurance=Decimal("0.20"),
                    prior_auth_required=True,
                ),
                BenefitDetail(
                    category="Pharmacie",
                    network_status=NetworkStatus.IN_NETWORK,
                    coverage_level=CoverageLevel.INDIVIDUAL,
                    copay=Decimal("10"),
                ),
            ],
        )


class EligibilityService:
    """Verifies patient coverage through the configured gateway."""

    def __init__(
        self,
        gateway: Optional[EligibilityGateway] = None,
        catalog: Optional[ReferenceCatalog] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.gateway = gateway or DemoEligibilityGateway()
        self.catalog = catalog or get_reference_catalog()
        self.clock = clock

    async def check_eligibility(self, request: EligibilityRequest) -> Eligibility:
        """
        Check eligibility for a patient.

        Raises:
            PayerNotFoundError: if the payer id does not resolve
        """
        payer = self.catalog.get_payer(request.payer_id)
        coverage = await self.gateway.fetch_coverage(request, payer)

        eligibility = Eligibility(
            **coverage.model_dump(),
            id=f"elig-{uuid4().hex[:12]}",
            patient_id=request.patient_id,
            payer_id=payer.id,
            payer_name=payer.name,
            member_id=request.member_id,
            date_of_service=request.date_of_service,
            checked_at=self.clock(),
        )

        logger.info(
            f"Eligibility checked for member {request.member_id} with {payer.name}: "
            f"{eligibility.coverage_status.value}"
        )
        return eligibility
