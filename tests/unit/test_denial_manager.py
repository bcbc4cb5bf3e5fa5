"""
Denial Manager Tests.

Tests for:
- Denial categorization
- Denial creation from posted outcomes
- Appeal filing and decisions
- Review and write-off
"""

from datetime import timedelta
from decimal import Decimal

import pytest
import pytest_asyncio

from revcycle.core.enums import (
    AdjustmentGroup,
    AppealDecision,
    AppealLevel,
    AppealStatus,
    ClaimStatus,
    DenialCategory,
    DenialStatus,
    PaymentOutcome,
    ResolutionType,
)
from revcycle.models.claim import Adjustment
from revcycle.services.denial_manager import categorize_denial
from revcycle.services.events import ClaimOutcomePosted
from revcycle.services.exceptions import (
    AppealConflictError,
    AppealNotFoundError,
    ClaimNotFoundError,
    DenialNotFoundError,
    InvalidTransitionError,
    PreconditionFailedError,
)


def co(code: str, amount: str = "100") -> Adjustment:
    return Adjustment(code=code, group=AdjustmentGroup.CO, amount=Decimal(amount))


async def deny(service, make_remittance, claim, adjustments, remittance_number="ERA-D1"):
    await service.process_remittance(
        make_remittance(
            [
                {
                    "claim_number": claim.claim_number,
                    "status": "denied",
                    "adjustments": adjustments,
                }
            ],
            remittance_number=remittance_number,
        )
    )
    return service.store.denials_for_claim(claim.id)[-1]


@pytest_asyncio.fixture
async def denied(service, submitted_claim, make_remittance):
    """A claim denied with CO-50, and its denial work item."""
    denial = await deny(
        service,
        make_remittance,
        submitted_claim,
        [{"code": "CO-50", "group": "CO", "amount": Decimal("350")}],
    )
    return submitted_claim, denial


@pytest.mark.unit
class TestCategorizeDenial:
    @pytest.mark.parametrize(
        "code,category",
        [
            ("CO-50", DenialCategory.CLINICAL),
            ("CO-11", DenialCategory.CLINICAL),
            ("CO-16", DenialCategory.ADMINISTRATIVE),
            ("CO-29", DenialCategory.ADMINISTRATIVE),
            ("CO-197", DenialCategory.AUTHORIZATION),
            ("CO-999", DenialCategory.TECHNICAL),
        ],
    )
    def test_known_codes(self, catalog, code, category):
        assert categorize_denial([co(code)], catalog) == category

    def test_bare_code_is_qualified_by_group(self, catalog):
        assert categorize_denial([co("50")], catalog) == DenialCategory.CLINICAL

    def test_group_matters(self, catalog):
        adjustment = Adjustment(code="50", group=AdjustmentGroup.PR, amount=Decimal("10"))
        assert categorize_denial([adjustment], catalog) == DenialCategory.TECHNICAL

    def test_first_category_in_order_wins(self, catalog):
        assert (
            categorize_denial([co("CO-197"), co("CO-16"), co("CO-50")], catalog)
            == DenialCategory.CLINICAL
        )

    def test_no_adjustments(self, catalog):
        assert categorize_denial([], catalog) == DenialCategory.TECHNICAL


@pytest.mark.unit
class TestDenialCreation:
    @pytest.mark.asyncio
    async def test_only_payer_codes_kept(self, service, submitted_claim, make_remittance):
        denial = await deny(
            service,
            make_remittance,
            submitted_claim,
            [
                {"code": "CO-50", "group": "CO", "amount": Decimal("300")},
                {"code": "PR-2", "group": "PR", "amount": Decimal("50")},
            ],
        )

        assert denial.denial_codes == ("CO-50",)
        assert denial.denial_reasons == (
            "Non-covered service: not deemed a medical necessity",
            "Coinsurance amount",
        )

    @pytest.mark.asyncio
    async def test_unknown_code_reason_falls_back(self, service, submitted_claim, make_remittance):
        denial = await deny(
            service,
            make_remittance,
            submitted_claim,
            [
                {
                    "code": "CO-242",
                    "group": "CO",
                    "amount": Decimal("350"),
                    "description": "Services not provided by network",
                }
            ],
        )
        assert denial.denial_reasons == ("Services not provided by network",)
        assert denial.category == DenialCategory.TECHNICAL

    @pytest.mark.asyncio
    async def test_handler_does_not_reopen_open_denial(self, service, denied):
        claim, _ = denied
        event = ClaimOutcomePosted(
            claim_id=claim.id,
            claim_number=claim.claim_number,
            remittance_number="ERA-D2",
            outcome=PaymentOutcome.DENIED,
            adjustments=(co("CO-50"),),
        )

        await service.denials.handle_outcome_posted(event)
        await service.denials.handle_outcome_posted(event)

        assert len(service.list_denials()) == 1

    @pytest.mark.asyncio
    async def test_handler_ignores_payments(self, service, submitted_claim):
        await service.denials.handle_outcome_posted(
            ClaimOutcomePosted(claim_id=submitted_claim.id, outcome=PaymentOutcome.PAID)
        )
        assert service.list_denials() == []

    @pytest.mark.asyncio
    async def test_handler_unknown_claim(self, service):
        with pytest.raises(ClaimNotFoundError):
            await service.denials.handle_outcome_posted(
                ClaimOutcomePosted(claim_id="missing", outcome=PaymentOutcome.DENIED)
            )

    def test_get_unknown_denial(self, service):
        with pytest.raises(DenialNotFoundError):
            service.get_denial("missing")


@pytest.mark.unit
class TestFileAppeal:
    @pytest.mark.asyncio
    async def test_file_first_level_appeal(self, service, denied, clock):
        claim, denial = denied
        clock.advance(days=10)

        await service.file_appeal(
            denial.id, AppealLevel.FIRST, ["chart-notes.pdf"], "Medically necessary"
        )

        assert denial.status == DenialStatus.APPEALING
        assert claim.status == ClaimStatus.APPEALED

        appeal = denial.appeals[0]
        assert appeal.level == AppealLevel.FIRST
        assert appeal.status == AppealStatus.PENDING
        assert appeal.filed_date == clock.now
        assert appeal.deadline == clock.now + timedelta(days=30)
        assert appeal.supporting_docs == ("chart-notes.pdf",)

        event = claim.submission_history[-1]
        assert event.event == "Appeal filed: first level"
        assert event.details == "Medically necessary"

    @pytest.mark.asyncio
    async def test_unknown_denial(self, service):
        with pytest.raises(DenialNotFoundError):
            await service.file_appeal("missing", AppealLevel.FIRST, [], "reason")

    @pytest.mark.asyncio
    async def test_second_appeal_while_one_open(self, service, denied):
        _, denial = denied
        await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")

        with pytest.raises(AppealConflictError):
            await service.file_appeal(denial.id, AppealLevel.FIRST, [], "again")
        with pytest.raises(AppealConflictError):
            await service.file_appeal(denial.id, AppealLevel.SECOND, [], "escalate")
        assert len(denial.appeals) == 1

    @pytest.mark.asyncio
    async def test_appeal_on_resolved_denial(self, service, denied):
        _, denial = denied
        service.write_off_denial(denial.id)

        with pytest.raises(PreconditionFailedError):
            await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")


@pytest.mark.unit
class TestAppealDecision:
    @pytest.mark.asyncio
    async def test_approved(self, service, denied, clock):
        claim, denial = denied
        await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")
        appeal = denial.appeals[0]
        clock.advance(days=21)

        await service.record_appeal_decision(
            denial.id, appeal.id, AppealDecision.APPROVED, "Overturned on review"
        )

        assert appeal.status == AppealStatus.APPROVED
        assert appeal.response.decision == AppealDecision.APPROVED
        assert appeal.response.received_date == clock.now
        assert denial.status == DenialStatus.RESOLVED
        assert denial.resolution.type == ResolutionType.OVERTURNED
        assert claim.status == ClaimStatus.PROCESSING
        assert claim.submission_history[-1].event == "Appeal approved: first level"

    @pytest.mark.asyncio
    async def test_partial(self, service, denied):
        claim, denial = denied
        await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")

        await service.record_appeal_decision(
            denial.id, denial.appeals[0].id, AppealDecision.PARTIAL
        )

        assert denial.resolution.type == ResolutionType.PARTIAL
        assert claim.status == ClaimStatus.PROCESSING

    @pytest.mark.asyncio
    async def test_denied_returns_to_review_and_allows_next_level(self, service, denied):
        claim, denial = denied
        await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")
        first = denial.appeals[0]

        await service.record_appeal_decision(denial.id, first.id, AppealDecision.DENIED)

        assert first.status == AppealStatus.DENIED
        assert denial.status == DenialStatus.IN_REVIEW
        assert denial.resolution is None
        assert claim.status == ClaimStatus.DENIED

        await service.file_appeal(denial.id, AppealLevel.SECOND, [], "escalate")
        assert claim.status == ClaimStatus.APPEALED
        assert [a.level for a in denial.appeals] == [AppealLevel.FIRST, AppealLevel.SECOND]

    @pytest.mark.asyncio
    async def test_denied_judicial_appeal_upholds_denial(self, service, denied):
        claim, denial = denied
        await service.file_appeal(denial.id, AppealLevel.JUDICIAL, [], "court filing")

        await service.record_appeal_decision(
            denial.id, denial.appeals[0].id, AppealDecision.DENIED, "Upheld"
        )

        assert denial.status == DenialStatus.RESOLVED
        assert denial.resolution.type == ResolutionType.UPHELD
        assert denial.resolution.notes == "Upheld"
        assert claim.status == ClaimStatus.DENIED

    @pytest.mark.asyncio
    async def test_decision_recorded_once(self, service, denied):
        _, denial = denied
        await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")
        appeal_id = denial.appeals[0].id
        await service.record_appeal_decision(denial.id, appeal_id, AppealDecision.DENIED)

        with pytest.raises(AppealConflictError):
            await service.record_appeal_decision(denial.id, appeal_id, AppealDecision.APPROVED)

    @pytest.mark.asyncio
    async def test_unknown_appeal(self, service, denied):
        _, denial = denied
        with pytest.raises(AppealNotFoundError):
            await service.record_appeal_decision(denial.id, "missing", AppealDecision.APPROVED)

    @pytest.mark.asyncio
    async def test_claim_transition_guards_appeal(self, service, denied):
        claim, denial = denied
        await service.void_claim(claim.id, "Patient disputes encounter")

        with pytest.raises(InvalidTransitionError):
            await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")
        assert denial.appeals == []
        assert denial.status == DenialStatus.NEW


@pytest.mark.unit
class TestDenialWorkQueue:
    @pytest.mark.asyncio
    async def test_start_review(self, service, denied):
        _, denial = denied
        service.start_review(denial.id, assigned_to="analyst-3")

        assert denial.status == DenialStatus.IN_REVIEW
        assert denial.assigned_to == "analyst-3"
        with pytest.raises(PreconditionFailedError):
            service.start_review(denial.id)

    @pytest.mark.asyncio
    async def test_write_off_defaults_to_outstanding_balance(self, service, denied, fixed_now):
        _, denial = denied
        service.write_off_denial(denial.id, notes="Below appeal threshold")

        assert denial.status == DenialStatus.WRITTEN_OFF
        assert denial.resolution.type == ResolutionType.WRITTEN_OFF
        assert denial.resolution.amount == Decimal("350")
        assert denial.resolution.date == fixed_now
        assert denial.resolution.notes == "Below appeal threshold"

    @pytest.mark.asyncio
    async def test_write_off_blocked_by_open_appeal(self, service, denied):
        _, denial = denied
        await service.file_appeal(denial.id, AppealLevel.FIRST, [], "reason")

        with pytest.raises(AppealConflictError):
            service.write_off_denial(denial.id, amount=Decimal("100"))
        assert denial.status == DenialStatus.APPEALING

    @pytest.mark.asyncio
    async def test_written_off_denial_is_closed(self, service, denied):
        _, denial = denied
        service.write_off_denial(denial.id, amount=Decimal("100"))
        with pytest.raises(PreconditionFailedError):
            service.write_off_denial(denial.id)

    @pytest.mark.asyncio
    async def test_list_filters_and_order(
        self, service, denied, make_claim_data, make_remittance, clock
    ):
        _, clinical = denied
        clock.advance(days=2)
        other = service.create_claim(make_claim_data(patient_id="pat-002"))
        await service.validate_claim(other.id)
        await service.submit_claim(other.id)
        administrative = await deny(
            service,
            make_remittance,
            other,
            [{"code": "CO-16", "group": "CO", "amount": Decimal("350")}],
            remittance_number="ERA-D2",
        )

        assert service.list_denials() == [administrative, clinical]
        assert service.list_denials(category=DenialCategory.CLINICAL) == [clinical]

        service.start_review(clinical.id)
        assert service.list_denials(status=DenialStatus.NEW) == [administrative]
        assert service.list_denials(
            status=DenialStatus.IN_REVIEW, category=DenialCategory.ADMINISTRATIVE
        ) == []
