"""
Claim Builder Tests.

Tests for:
- Claim number generation
- Sequencing, pricing and charge mirroring
- Payer resolution
"""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from revcycle.core.enums import ClaimStatus
from revcycle.services.claim_builder import ClaimBuilder, ClaimNumberGenerator
from revcycle.services.exceptions import PayerNotFoundError


@pytest.fixture
def builder(catalog, clock):
    return ClaimBuilder(catalog=catalog, number_generator=ClaimNumberGenerator(), clock=clock)


@pytest.mark.unit
class TestClaimNumberGenerator:
    def test_format(self, fixed_now):
        generator = ClaimNumberGenerator()
        assert generator.next_number(fixed_now) == "CLM-202603-000001"

    def test_monotonic_within_month(self, fixed_now):
        generator = ClaimNumberGenerator()
        numbers = [generator.next_number(fixed_now) for _ in range(3)]
        assert numbers == sorted(numbers)
        assert numbers[-1] == "CLM-202603-000003"

    def test_sequence_restarts_each_month(self, fixed_now):
        generator = ClaimNumberGenerator()
        generator.next_number(fixed_now)
        generator.next_number(fixed_now)
        april = datetime(2026, 4, 1, tzinfo=timezone.utc)
        assert generator.next_number(april) == "CLM-202604-000001"


@pytest.mark.unit
class TestClaimBuilder:
    def test_total_charges_sum_procedure_lines(self, builder, make_claim_data):
        claim = builder.build(make_claim_data())
        assert claim.total_charges == Decimal("350")

    def test_line_total_is_quantity_times_unit_price(self, builder, make_claim_data):
        claim = builder.build(
            make_claim_data(
                procedures=[
                    {"code": "97110", "quantity": 3, "unit_price": Decimal("45.50")},
                ]
            )
        )
        assert claim.procedures[0].total_price == Decimal("136.50")
        assert claim.total_charges == Decimal("136.50")

    def test_sequences_are_one_based_in_input_order(self, builder, make_claim_data):
        claim = builder.build(
            make_claim_data(
                diagnoses=[
                    {"code": "E11.9"},
                    {"code": "I10", "is_principal": True},
                ]
            )
        )
        assert [(d.sequence, d.code) for d in claim.diagnoses] == [(1, "E11.9"), (2, "I10")]
        assert [p.sequence for p in claim.procedures] == [1, 2]

    def test_charges_mirror_procedures(self, builder, make_claim_data):
        claim = builder.build(make_claim_data())
        assert len(claim.charges) == len(claim.procedures)
        for charge, procedure in zip(claim.charges, claim.procedures):
            assert charge.procedure_sequence == procedure.sequence
            assert charge.charge_code == procedure.code
            assert charge.total_charge == procedure.total_price

    def test_procedure_service_date_defaults_to_claim_date(self, builder, make_claim_data):
        claim = builder.build(make_claim_data())
        assert all(p.service_date == date(2026, 2, 20) for p in claim.procedures)

    def test_payer_name_denormalized(self, builder, make_claim_data):
        claim = builder.build(make_claim_data(payer_id="payer-002"))
        assert claim.payer_name == "MGEN"

    def test_unknown_payer(self, builder, make_claim_data):
        with pytest.raises(PayerNotFoundError):
            builder.build(make_claim_data(payer_id="payer-999"))

    def test_built_claim_is_draft_without_financials(self, builder, make_claim_data, fixed_now):
        claim = builder.build(make_claim_data())
        assert claim.status == ClaimStatus.DRAFT
        assert claim.paid_amount is None
        assert claim.allowed_amount is None
        assert claim.adjustments == ()
        assert claim.due_date is None
        assert claim.created_at == fixed_now

    def test_authorization_attached(self, builder, make_claim_data):
        claim = builder.build(
            make_claim_data(
                authorization={
                    "number": "AUTH-778",
                    "effective_date": date(2026, 1, 1),
                    "expiration_date": date(2026, 6, 30),
                    "approved_units": 10,
                }
            )
        )
        assert claim.authorization.number == "AUTH-778"
        assert claim.authorization.approved_units == 10
