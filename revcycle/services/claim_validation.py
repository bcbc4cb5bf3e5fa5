"""
Claim Validation Service.

Provides:
- Claim completeness validation
- Prior authorization checks
- High-value advisory warnings

Validation is stateless over a Claim; the caller decides what to do with the
result (the revenue cycle service promotes a clean draft to ready).
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Optional

from revcycle.core.config import RevenueCycleSettings, get_settings
from revcycle.models.claim import Claim

logger = logging.getLogger(__name__)


class ValidationSeverity(str, Enum):
    """Severity level of validation issues."""

    ERROR = "error"  # Blocks submission
    WARNING = "warning"  # Advisory only


class ValidationCategory(str, Enum):
    """Category of validation issue."""

    COMPLETENESS = "completeness"
    AUTHORIZATION = "authorization"
    BUSINESS_RULE = "business_rule"


@dataclass
class ValidationIssue:
    """Single validation issue."""

    code: str
    message: str
    severity: ValidationSeverity
    category: ValidationCategory
    field: Optional[str] = None
    details: Optional[dict] = None


@dataclass
class ValidationResult:
    """Complete validation result."""

    is_valid: bool = True
    issues: list[ValidationIssue] = field(default_factory=list)
    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)
    validated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def add_issue(self, issue: ValidationIssue) -> None:
        """Add a validation issue."""
        self.issues.append(issue)
        if issue.severity == ValidationSeverity.ERROR:
            self.errors.append(issue)
            self.is_valid = False
        elif issue.severity == ValidationSeverity.WARNING:
            self.warnings.append(issue)

    @property
    def error_count(self) -> int:
        return len(self.errors)

    @property
    def warning_count(self) -> int:
        return len(self.warnings)


@dataclass
class ValidationConfig:
    """Configuration for claim validation."""

    high_value_threshold: Decimal = Decimal("50000")

    @classmethod
    def from_settings(cls, settings: RevenueCycleSettings) -> "ValidationConfig":
        return cls(high_value_threshold=settings.HIGH_VALUE_CLAIM_THRESHOLD)


class ClaimValidator:
    """
    Runs the submission-readiness rules over a claim.

    Every rule runs; none short-circuits another.
    """

    def __init__(self, config: Optional[ValidationConfig] = None):
        self.config = config or ValidationConfig.from_settings(get_settings())

    def validate(self, claim: Claim, now: Optional[datetime] = None) -> ValidationResult:
        """
        Validate a claim.

        Args:
            claim: Claim to validate
            now: Validation time used for authorization expiry

        Returns:
            ValidationResult with all issues found
        """
        now = now or datetime.now(timezone.utc)
        result = ValidationResult(validated_at=now)

        self._validate_completeness(claim, result)
        self._validate_authorization(claim, result, now)
        self._validate_amounts(claim, result)

        logger.debug(
            f"Validated claim {claim.claim_number}: "
            f"{result.error_count} errors, {result.warning_count} warnings"
        )
        return result

    # =========================================================================
    # Completeness Validation
    # =========================================================================

    def _validate_completeness(self, claim: Claim, result: ValidationResult) -> None:
        if not claim.diagnoses:
            result.add_issue(ValidationIssue(
                code="MISSING_DIAGNOSIS",
                message="At least one diagnosis is required",
                severity=ValidationSeverity.ERROR,
                category=ValidationCategory.COMPLETENESS,
                field="diagnoses",
            ))

        if not claim.procedures:
            result.add_issue(ValidationIssue(
                code="MISSING_PROCEDURE",
                message="At least one procedure is required",
                severity=ValidationSeverity.ERROR,
                category=ValidationCategory.COMPLETENESS,
                field="procedures",
            ))

        principals = claim.principal_diagnoses
        if not principals:
            result.add_issue(ValidationIssue(
                code="MISSING_PRINCIPAL_DIAGNOSIS",
                message="A principal diagnosis must be identified",
                severity=ValidationSeverity.ERROR,
                category=ValidationCategory.COMPLETENESS,
                field="diagnoses",
            ))
        elif len(principals) > 1:
            result.add_issue(ValidationIssue(
                code="MULTIPLE_PRINCIPAL_DIAGNOSES",
                message="Exactly one principal diagnosis is allowed",
                severity=ValidationSeverity.ERROR,
                category=ValidationCategory.COMPLETENESS,
                field="diagnoses",
                details={"sequences": [d.sequence for d in principals]},
            ))

    # =========================================================================
    # Authorization Validation
    # =========================================================================

    def _validate_authorization(
        self,
        claim: Claim,
        result: ValidationResult,
        now: datetime,
    ) -> None:
        if claim.requires_authorization and claim.authorization is None:
            result.add_issue(ValidationIssue(
                code="MISSING_PRIOR_AUTH",
                message="Prior authorization is required for one or more procedures",
                severity=ValidationSeverity.ERROR,
                category=ValidationCategory.AUTHORIZATION,
                field="authorization",
                details={
                    "procedures": [
                        p.sequence for p in claim.procedures if p.requires_authorization
                    ]
                },
            ))

        if claim.authorization is not None and claim.authorization.is_expired(now):
            result.add_issue(ValidationIssue(
                code="PRIOR_AUTH_EXPIRED",
                message="The prior authorization has expired",
                severity=ValidationSeverity.ERROR,
                category=ValidationCategory.AUTHORIZATION,
                field="authorization",
                details={
                    "expiration_date": claim.authorization.expiration_date.isoformat()
                },
            ))

    # =========================================================================
    # Amount Validation
    # =========================================================================

    def _validate_amounts(self, claim: Claim, result: ValidationResult) -> None:
        if claim.total_charges > self.config.high_value_threshold:
            result.add_issue(ValidationIssue(
                code="HIGH_VALUE_CLAIM",
                message="High-value claim: review before submission",
                severity=ValidationSeverity.WARNING,
                category=ValidationCategory.BUSINESS_RULE,
                field="total_charges",
                details={
                    "total_charges": str(claim.total_charges),
                    "threshold": str(self.config.high_value_threshold),
                },
            ))


def get_claim_validator(config: Optional[ValidationConfig] = None) -> ClaimValidator:
    """Get claim validator instance."""
    return ClaimValidator(config=config)
