"""
Eligibility Service Tests.
"""

from datetime import date

import pytest

from revcycle.core.enums import CoverageStatus
from revcycle.schemas.eligibility import CoverageInfo, EligibilityRequest
from revcycle.services.eligibility import EligibilityGateway, EligibilityService
from revcycle.services.exceptions import PayerNotFoundError


class TerminatedCoverageGateway(EligibilityGateway):
    def __init__(self):
        self.requests = []

    async def fetch_coverage(self, request, payer):
        self.requests.append((request, payer))
        return CoverageInfo(
            subscriber_name="Jean Dupont",
            coverage_status=CoverageStatus.TERMINATED,
            effective_date=date(2020, 1, 1),
            termination_date=date(2025, 12, 31),
            plan_type="Mutuelle",
            plan_name="Essentiel",
        )


@pytest.fixture
def request_data():
    return EligibilityRequest(
        patient_id="pat-001",
        payer_id="payer-001",
        member_id="MBR-123456",
        date_of_service=date(2026, 3, 2),
    )


@pytest.mark.unit
class TestEligibilityService:
    @pytest.mark.asyncio
    async def test_demo_gateway_reports_active_coverage(self, catalog, clock, request_data):
        service = EligibilityService(catalog=catalog, clock=clock)

        eligibility = await service.check_eligibility(request_data)

        assert eligibility.is_eligible
        assert eligibility.payer_name == "CPAM - Assurance Maladie"
        assert eligibility.member_id == "MBR-123456"
        assert eligibility.checked_at == clock.now
        assert eligibility.id.startswith("elig-")
        assert [b.category for b in eligibility.benefits] == [
            "Consultations",
            "Hospitalisation",
            "Pharmacie",
        ]
        assert eligibility.benefits[1].prior_auth_required

    @pytest.mark.asyncio
    async def test_unknown_payer(self, catalog, request_data):
        service = EligibilityService(catalog=catalog)
        request = request_data.model_copy(update={"payer_id": "payer-999"})

        with pytest.raises(PayerNotFoundError):
            await service.check_eligibility(request)

    @pytest.mark.asyncio
    async def test_custom_gateway(self, catalog, clock, request_data):
        gateway = TerminatedCoverageGateway()
        service = EligibilityService(gateway=gateway, catalog=catalog, clock=clock)

        eligibility = await service.check_eligibility(request_data)

        assert not eligibility.is_eligible
        assert eligibility.termination_date == date(2025, 12, 31)
        assert gateway.requests[0][1].id == "payer-001"

    @pytest.mark.asyncio
    async def test_through_revenue_cycle_service(self, service, request_data):
        eligibility = await service.check_eligibility(request_data)
        assert eligibility.coverage_status == CoverageStatus.ACTIVE
