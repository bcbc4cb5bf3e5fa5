"""
Claim Store.

In-memory aggregate store keyed by id, with a claim-number index and one
asyncio lock per claim. Every mutation of a claim runs while holding that
claim's lock; reads take snapshots without locking.
"""

import asyncio
import logging
from typing import Optional

from revcycle.models.claim import Claim
from revcycle.models.denial import DenialManagement
from revcycle.models.remittance import RemittanceAdvice

logger = logging.getLogger(__name__)


class ClaimStore:
    """Aggregate store for claims, denials and remittances."""

    def __init__(self):
        self._claims: dict[str, Claim] = {}
        self._claim_ids_by_number: dict[str, str] = {}
        self._locks: dict[str, asyncio.Lock] = {}

        self._denials: dict[str, DenialManagement] = {}
        self._denial_ids_by_claim: dict[str, list[str]] = {}

        self._remittances: dict[str, RemittanceAdvice] = {}

    # =========================================================================
    # Claims
    # =========================================================================

    def add_claim(self, claim: Claim) -> None:
        if claim.id in self._claims:
            raise ValueError(f"Claim already stored: {claim.id}")
        if claim.claim_number in self._claim_ids_by_number:
            raise ValueError(f"Claim number already issued: {claim.claim_number}")
        self._claims[claim.id] = claim
        self._claim_ids_by_number[claim.claim_number] = claim.id

    def get_claim(self, claim_id: str) -> Optional[Claim]:
        return self._claims.get(claim_id)

    def get_claim_by_number(self, claim_number: str) -> Optional[Claim]:
        claim_id = self._claim_ids_by_number.get(claim_number)
        return self._claims.get(claim_id) if claim_id else None

    def list_claims(self) -> list[Claim]:
        """Snapshot of all claims."""
        return list(self._claims.values())

    def lock_for(self, claim_id: str) -> asyncio.Lock:
        """The lock serializing mutations of one claim."""
        lock = self._locks.get(claim_id)
        if lock is None:
            lock = self._locks.setdefault(claim_id, asyncio.Lock())
        return lock

    # =========================================================================
    # Denials
    # =========================================================================

    def add_denial(self, denial: DenialManagement) -> None:
        self._denials[denial.id] = denial
        self._denial_ids_by_claim.setdefault(denial.claim_id, []).append(denial.id)

    def get_denial(self, denial_id: str) -> Optional[DenialManagement]:
        return self._denials.get(denial_id)

    def list_denials(self) -> list[DenialManagement]:
        return list(self._denials.values())

    def denials_for_claim(self, claim_id: str) -> list[DenialManagement]:
        return [self._denials[i] for i in self._denial_ids_by_claim.get(claim_id, [])]

    # =========================================================================
    # Remittances
    # =========================================================================

    def add_remittance(self, remittance: RemittanceAdvice) -> None:
        self._remittances[remittance.id] = remittance

    def get_remittance(self, remittance_id: str) -> Optional[RemittanceAdvice]:
        return self._remittances.get(remittance_id)

    def list_remittances(self) -> list[RemittanceAdvice]:
        return list(self._remittances.values())
