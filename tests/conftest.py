"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.
"""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest
import pytest_asyncio

from revcycle.core.config import RevenueCycleSettings
from revcycle.schemas.claim import ClaimCreate
from revcycle.schemas.remittance import ClaimPaymentInput, RemittanceCreate
from revcycle.services.claim_state_machine import ClaimStateMachine
from revcycle.services.claim_store import ClaimStore
from revcycle.services.reference_catalog import ReferenceCatalog
from revcycle.services.revenue_cycle_service import RevenueCycleService

FIXED_NOW = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Settable clock injected into services."""

    def __init__(self, now: datetime = FIXED_NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def clock():
    """Clock starting at a fixed instant."""
    return FakeClock()


@pytest.fixture
def settings():
    """Settings with defaults, isolated from any local .env file."""
    return RevenueCycleSettings(_env_file=None, ENVIRONMENT="testing")


@pytest.fixture
def catalog():
    return ReferenceCatalog()


@pytest.fixture
def service(settings, catalog, clock):
    """Revenue cycle service over an empty store."""
    return RevenueCycleService(
        store=ClaimStore(),
        catalog=catalog,
        settings=settings,
        state_machine=ClaimStateMachine(),
        clock=clock,
    )


def build_claim_data(**overrides) -> ClaimCreate:
    """Two procedures ($100 and $250) and one principal diagnosis."""
    data = {
        "patient_id": "pat-001",
        "patient_name": "Marie Dubois",
        "member_id": "MBR-123456",
        "payer_id": "payer-001",
        "provider_id": "prov-001",
        "provider_name": "Dr. Martin",
        "date_of_service": date(2026, 2, 20),
        "place_of_service": "11",
        "diagnoses": [
            {"code": "J06.9", "description": "Acute upper respiratory infection", "is_principal": True},
        ],
        "procedures": [
            {"code": "99213", "description": "Office visit", "quantity": 1, "unit_price": Decimal("100")},
            {"code": "87880", "description": "Strep test", "quantity": 1, "unit_price": Decimal("250")},
        ],
    }
    data.update(overrides)
    return ClaimCreate(**data)


def build_remittance(
    lines: list[dict],
    remittance_number: str = "ERA-0001",
    payer_id: str = "payer-001",
    payment_amount: Decimal | None = None,
) -> RemittanceCreate:
    payments = [ClaimPaymentInput(**line) for line in lines]
    if payment_amount is None:
        payment_amount = sum((p.paid_amount for p in payments), Decimal("0"))
    return RemittanceCreate(
        remittance_number=remittance_number,
        payer_id=payer_id,
        payment_amount=payment_amount,
        claim_payments=payments,
    )


@pytest.fixture
def fixed_now():
    return FIXED_NOW


@pytest.fixture
def make_claim_data():
    """Factory for ClaimCreate payloads; keyword overrides replace fields."""
    return build_claim_data


@pytest.fixture
def make_remittance():
    """Factory for RemittanceCreate batches."""
    return build_remittance


@pytest.fixture
def claim_data():
    return build_claim_data()


@pytest_asyncio.fixture
async def submitted_claim(service, claim_data):
    """A claim created, validated and submitted at the fixed clock time."""
    claim = service.create_claim(claim_data)
    await service.validate_claim(claim.id)
    await service.submit_claim(claim.id)
    return claim


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "api: mark test as an API test"
    )
