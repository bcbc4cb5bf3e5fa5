"""
Reference Catalog.

Static payer directory and denial-code dictionary. The catalog is reference
data supplied to the services; it has no lifecycle of its own.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

from revcycle.core.enums import DenialCategory
from revcycle.services.exceptions import PayerNotFoundError


@dataclass(frozen=True)
class Payer:
    id: str
    name: str
    type: str


DEFAULT_PAYERS: tuple[Payer, ...] = (
    Payer(id="payer-001", name="CPAM - Assurance Maladie", type="government"),
    Payer(id="payer-002", name="MGEN", type="mutuelle"),
    Payer(id="payer-003", name="Harmonie Mutuelle", type="mutuelle"),
    Payer(id="payer-004", name="AXA Santé", type="complementary"),
)


DEFAULT_DENIAL_CODES: dict[str, str] = {
    "CO-4": "The procedure code is inconsistent with the modifier or diagnosis",
    "CO-11": "The diagnosis is inconsistent with the procedure",
    "CO-16": "Claim lacks information needed for adjudication",
    "CO-18": "Exact duplicate claim/service",
    "CO-29": "The time limit for filing has expired",
    "CO-45": "Charge exceeds fee schedule/maximum allowable",
    "CO-50": "Non-covered service: not deemed a medical necessity",
    "CO-146": "Diagnosis was invalid for the date(s) of service reported",
    "CO-197": "Precertification/authorization/notification absent",
    "CO-198": "Precertification/authorization exceeded",
    "PR-1": "Deductible amount",
    "PR-2": "Coinsurance amount",
    "PR-3": "Co-payment amount",
}


# Evaluated in order; the first category with a matching code wins.
DEFAULT_DENIAL_CATEGORY_CODES: tuple[tuple[DenialCategory, frozenset[str]], ...] = (
    (DenialCategory.CLINICAL, frozenset({"CO-4", "CO-11", "CO-50", "CO-146"})),
    (DenialCategory.ADMINISTRATIVE, frozenset({"CO-16", "CO-18", "CO-29"})),
    (DenialCategory.AUTHORIZATION, frozenset({"CO-197", "CO-198"})),
)


class ReferenceCatalog:
    """Lookup of payers and denial codes."""

    def __init__(
        self,
        payers: Iterable[Payer] = DEFAULT_PAYERS,
        denial_codes: Optional[dict[str, str]] = None,
        denial_categories: tuple[
            tuple[DenialCategory, frozenset[str]], ...
        ] = DEFAULT_DENIAL_CATEGORY_CODES,
    ):
        self._payers = {p.id: p for p in payers}
        self._denial_codes = dict(
            DEFAULT_DENIAL_CODES if denial_codes is None else denial_codes
        )
        self._denial_categories = denial_categories

    def find_payer(self, payer_id: str) -> Optional[Payer]:
        return self._payers.get(payer_id)

    def get_payer(self, payer_id: str) -> Payer:
        """Resolve a payer or raise PayerNotFoundError."""
        payer = self._payers.get(payer_id)
        if payer is None:
            raise PayerNotFoundError(payer_id)
        return payer

    def list_payers(self) -> list[Payer]:
        return list(self._payers.values())

    def describe_denial_code(self, code: str) -> Optional[str]:
        return self._denial_codes.get(code)

    @property
    def denial_categories(self) -> tuple[tuple[DenialCategory, frozenset[str]], ...]:
        return self._denial_categories


_catalog: Optional[ReferenceCatalog] = None


def get_reference_catalog() -> ReferenceCatalog:
    """Get singleton catalog with the default reference data."""
    global _catalog
    if _catalog is None:
        _catalog = ReferenceCatalog()
    return _catalog
