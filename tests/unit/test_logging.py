"""
Logging Tests.
"""

import logging

import pytest
from loguru import logger

from revcycle.utils.logging import InterceptHandler, mask_identifiers


@pytest.mark.unit
class TestMasking:
    def test_member_id_masked(self):
        message = "Eligibility checked for member MBR-123456 with MGEN: active"
        assert mask_identifiers(message) == "Eligibility checked for member *** with MGEN: active"

    def test_bare_member_number_masked(self):
        assert mask_identifiers("lookup MBR-998877 failed") == "lookup MBR-*** failed"

    def test_claim_numbers_untouched(self):
        message = "Claim CLM-202603-000001 submitted"
        assert mask_identifiers(message) == message


@pytest.mark.unit
class TestInterceptHandler:
    def test_stdlib_records_reach_loguru(self):
        captured = []
        sink_id = logger.add(captured.append, format="{message}", level="INFO")
        stdlib_logger = logging.getLogger("revcycle.tests.intercept")
        stdlib_logger.addHandler(InterceptHandler())
        stdlib_logger.propagate = False
        try:
            stdlib_logger.warning("Remittance ERA-1 has 1 exception")
        finally:
            logger.remove(sink_id)
            stdlib_logger.handlers.clear()

        assert any("Remittance ERA-1 has 1 exception" in str(m) for m in captured)
