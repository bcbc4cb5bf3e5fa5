"""
Claim Builder.

Constructs the Claim aggregate from a ClaimCreate request: resolves the payer,
sequences diagnoses and procedures in input order, prices each procedure line
and mirrors the procedures into charges.
"""

import logging
import threading
from datetime import datetime
from typing import Callable, Optional
from uuid import uuid4

from revcycle.models.claim import (
    Authorization,
    Charge,
    Claim,
    Diagnosis,
    Procedure,
    utc_now,
)
from revcycle.schemas.claim import AuthorizationInput, ClaimCreate
from revcycle.services.reference_catalog import ReferenceCatalog, get_reference_catalog

logger = logging.getLogger(__name__)


class ClaimNumberGenerator:
    """
    Issues claim numbers.

    Format: CLM-{YYYYMM}-{SEQUENCE:06d}
    Example: CLM-202610-000001

    The sequence is monotonic within a month and restarts when the month
    prefix changes, so numbers sort in issue order.
    """

    def __init__(self, start: int = 0):
        self._lock = threading.Lock()
        self._period: Optional[str] = None
        self._sequence = start

    def next_number(self, now: datetime) -> str:
        period = now.strftime("%Y%m")
        with self._lock:
            if self._period is None or period > self._period:
                if self._period is not None:
                    self._sequence = 0
                self._period = period
            self._sequence += 1
            return f"CLM-{self._period}-{self._sequence:06d}"


def _build_authorization(data: Optional[AuthorizationInput]) -> Optional[Authorization]:
    if data is None:
        return None
    return Authorization(
        number=data.number,
        status=data.status,
        effective_date=data.effective_date,
        expiration_date=data.expiration_date,
        approved_units=data.approved_units,
        used_units=data.used_units,
        diagnosis_codes=tuple(data.diagnosis_codes),
        procedure_codes=tuple(data.procedure_codes),
    )


class ClaimBuilder:
    """Builds draft claims."""

    def __init__(
        self,
        catalog: Optional[ReferenceCatalog] = None,
        number_generator: Optional[ClaimNumberGenerator] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.catalog = catalog or get_reference_catalog()
        self.number_generator = number_generator or ClaimNumberGenerator()
        self.clock = clock

    def build(self, data: ClaimCreate, now: Optional[datetime] = None) -> Claim:
        """
        Build a draft claim.

        The history is left empty; the submission tracker seeds it.

        Raises:
            PayerNotFoundError: if the payer id does not resolve
        """
        payer = self.catalog.get_payer(data.payer_id)
        now = now or self.clock()
        claim_id = str(uuid4())

        diagnoses = tuple(
            Diagnosis(
                sequence=i,
                code=d.code,
                code_system=d.code_system,
                description=d.description,
                is_principal=d.is_principal,
                is_admitting=d.is_admitting,
                present_on_admission=d.present_on_admission,
            )
            for i, d in enumerate(data.diagnoses, start=1)
        )

        procedures = tuple(
            Procedure(
                sequence=i,
                code=p.code,
                code_system=p.code_system,
                description=p.description,
                modifiers=tuple(p.modifiers),
                service_date=p.service_date or data.date_of_service,
                quantity=p.quantity,
                unit_price=p.unit_price,
                diagnosis_pointers=tuple(p.diagnosis_pointers),
                authorization=p.authorization,
                rendering_provider_id=p.rendering_provider_id,
                rendering_provider_npi=p.rendering_provider_npi,
            )
            for i, p in enumerate(data.procedures, start=1)
        )

        charges = tuple(
            Charge(
                id=f"chg-{claim_id[:8]}-{p.sequence}",
                procedure_sequence=p.sequence,
                charge_code=p.code,
                description=p.description,
                quantity=p.quantity,
                unit_price=p.unit_price,
                total_charge=p.total_price,
            )
            for p in procedures
        )

        claim = Claim(
            id=claim_id,
            claim_number=self.number_generator.next_number(now),
            claim_type=data.claim_type,
            patient_id=data.patient_id,
            patient_name=data.patient_name,
            patient_dob=data.patient_dob,
            member_id=data.member_id,
            group_number=data.group_number,
            payer_id=payer.id,
            payer_name=payer.name,
            provider_id=data.provider_id,
            provider_name=data.provider_name,
            provider_npi=data.provider_npi,
            facility_id=data.facility_id,
            facility_name=data.facility_name,
            date_of_service=data.date_of_service,
            date_of_service_end=data.date_of_service_end,
            admission_date=data.admission_date,
            discharge_date=data.discharge_date,
            place_of_service=data.place_of_service,
            diagnoses=diagnoses,
            procedures=procedures,
            charges=charges,
            authorization=_build_authorization(data.authorization),
            created_at=now,
        )

        logger.debug(
            f"Built claim {claim.claim_number}: {len(procedures)} procedures, "
            f"total {claim.total_charges}"
        )
        return claim
