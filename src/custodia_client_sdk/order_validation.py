from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation


@dataclass(frozen=True)
class ValidationIssue:
    field: str
    reason: str


class ClientValidationError(ValueError):
    def __init__(self, issues: list[ValidationIssue]) -> None:
        self.issues = issues
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if not self.issues:
            return "Validation failed"
        issue = self.issues[0]
        return f"{issue.field}: {issue.reason}"


def _require_non_empty(value: str | None, field: str, issues: list[ValidationIssue]) -> str:
    if value is None or not value.strip():
        issues.append(ValidationIssue(field=field, reason="is required"))
        return ""
    return value.strip()


def _require_positive_amount(value: str | None, field: str, issues: list[ValidationIssue]) -> str:
    raw = _require_non_empty(value, field, issues)
    if not raw:
        return ""
    try:
        amount = Decimal(raw)
    except InvalidOperation:
        issues.append(ValidationIssue(field=field, reason="must be a number"))
        return ""
    if not amount.is_finite():
        issues.append(ValidationIssue(field=field, reason="must be a number"))
        return ""
    if amount <= 0:
        issues.append(ValidationIssue(field=field, reason="must be greater than 0"))
        return ""
    return raw


def validate_account_id(account_id: str | None) -> str:
    issues: list[ValidationIssue] = []
    normalized = _require_non_empty(account_id, "account_id", issues)
    if issues:
        raise ClientValidationError(issues)
    return normalized


def validate_buy_request(amount: str | None) -> str:
    """Return the trimmed amount, raising when it is not a positive number."""
    issues: list[ValidationIssue] = []
    normalized = _require_positive_amount(amount, "amount", issues)
    if issues:
        raise ClientValidationError(issues)
    return normalized


def validate_sell_request(amount: str | None, account_number: str | None) -> tuple[str, str]:
    issues: list[ValidationIssue] = []
    normalized_account = _require_non_empty(account_number, "account_number", issues)
    normalized_amount = _require_positive_amount(amount, "amount", issues)
    if issues:
        raise ClientValidationError(issues)
    return normalized_amount, normalized_account
