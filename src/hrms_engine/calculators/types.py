"""Type definitions for the payroll calculation pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any

ZERO = Decimal("0")


class WorkerType(str, Enum):
    """How an employee's base pay is determined."""

    SALARIED = "Salaried"
    HOURLY = "Hourly"
    CONTRACTOR = "Contractor"


class RuleBase(str, Enum):
    """Amount a statutory rule is applied to."""

    GROSS = "gross"
    TAXABLE = "taxable"


class PayrollValidationError(Exception):
    """Raised when an employee record cannot be used for payroll."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"Invalid payroll field '{field}': {message}")


class ConfigurationError(Exception):
    """Raised when a payroll configuration payload is malformed."""

    def __init__(self, message: str, rule_code: str | None = None):
        self.rule_code = rule_code
        msg = message if rule_code is None else f"Rule '{rule_code}': {message}"
        super().__init__(msg)


def to_decimal(value: Any, field_name: str) -> Decimal:
    """Convert a raw input value to Decimal without passing through binary floats."""
    if isinstance(value, bool):
        raise PayrollValidationError(field_name, "expected a number, got a boolean")
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            raise PayrollValidationError(field_name, f"not a number: {value!r}") from None
    else:
        raise PayrollValidationError(
            field_name, f"expected a number, got {type(value).__name__}"
        )
    if not result.is_finite():
        raise PayrollValidationError(field_name, "must be a finite number")
    return result


@dataclass(frozen=True)
class EmployeePayProfile:
    """Payroll-relevant fields of an employee.

    Which base-pay fields are required depends on ``worker_type``:
    salaried and contractor employees need ``salary`` (a contractor's contract
    amount), hourly employees need ``hourly_rate`` and ``hours_worked``.
    The remaining fields are adjustments and default to zero.
    """

    worker_type: WorkerType | str
    salary: Any = None
    hourly_rate: Any = None
    hours_worked: Any = None
    allowances: Any = ZERO
    deductions: Any = ZERO
    overtime: Any = ZERO
    bonus: Any = ZERO
    reimbursements: Any = ZERO
    employee_id: str | None = None


@dataclass(frozen=True)
class TaxBracket:
    """Tax bracket for progressive rules."""

    min_amount: Decimal
    max_amount: Decimal | None  # None = no upper limit
    rate: Decimal  # As decimal, e.g., 0.22 for 22%
    flat_amount: Decimal = ZERO  # Flat amount at bracket start


@dataclass(frozen=True)
class StatutoryRule:
    """A single statutory deduction or employer contribution."""

    code: str
    name: str
    rate: Decimal | None = None
    brackets: tuple[TaxBracket, ...] = ()
    base: RuleBase = RuleBase.GROSS
    reduces_taxable: bool = False
    employer: bool = False
    exempt_worker_types: frozenset[WorkerType] = frozenset()

    def applies_to(self, worker_type: WorkerType) -> bool:
        return worker_type not in self.exempt_worker_types


@dataclass(frozen=True)
class PayrollConfig:
    """Company-wide payroll configuration (one per tenant).

    Payload structure accepted by :meth:`from_payload`::

        {
            "rules": [
                {"code": "PENSION", "name": "Pension", "rate": "0.05",
                 "reduces_taxable": true, "exempt_worker_types": ["Contractor"]},
                {"code": "PAYE", "name": "Income tax", "base": "taxable",
                 "brackets": [
                     {"min": 0, "max": 5100, "rate": 0},
                     {"min": 5100, "max": null, "rate": 0.2}
                 ]},
                {"code": "PENSION_ER", "name": "Pension (employer)",
                 "rate": "0.05", "employer": true}
            ],
            "daily_target_hours": 8
        }
    """

    rules: tuple[StatutoryRule, ...] = ()
    daily_target_hours: Decimal | None = None

    @classmethod
    def flat_rate(cls, rate: Decimal | str, code: str = "STATUTORY") -> PayrollConfig:
        """Config with a single flat employee rate applied to gross pay."""
        return cls(rules=(StatutoryRule(code=code, name=code.title(), rate=Decimal(str(rate))),))

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> PayrollConfig:
        """Parse a stored or submitted config payload."""
        raw_rules = payload.get("rules")
        if not isinstance(raw_rules, list):
            raise ConfigurationError("'rules' must be a list")

        rules = []
        seen_codes: set[str] = set()
        for raw in raw_rules:
            rule = _parse_rule(raw)
            if rule.code in seen_codes:
                raise ConfigurationError("duplicate rule code", rule.code)
            seen_codes.add(rule.code)
            rules.append(rule)

        target = payload.get("daily_target_hours")
        daily_target_hours = None
        if target is not None:
            daily_target_hours = _config_decimal(target, "daily_target_hours")
            if daily_target_hours < 0:
                raise ConfigurationError("'daily_target_hours' must not be negative")
        return cls(rules=tuple(rules), daily_target_hours=daily_target_hours)

    def to_payload(self) -> dict[str, Any]:
        """Serialize to a JSON-safe payload (numbers as strings)."""
        return {
            "rules": [_rule_to_payload(r) for r in self.rules],
            "daily_target_hours": (
                str(self.daily_target_hours) if self.daily_target_hours is not None else None
            ),
        }


def _parse_rule(raw: Any) -> StatutoryRule:
    if not isinstance(raw, dict):
        raise ConfigurationError("each rule must be an object")

    code = raw.get("code")
    if not code or not isinstance(code, str):
        raise ConfigurationError("rule is missing a 'code'")

    has_rate = raw.get("rate") is not None
    has_brackets = bool(raw.get("brackets"))
    if has_rate == has_brackets:
        raise ConfigurationError("exactly one of 'rate' or 'brackets' is required", code)

    try:
        rate = _config_decimal(raw["rate"], "rate", code) if has_rate else None
        brackets = tuple(
            TaxBracket(
                min_amount=_config_decimal(b["min"], "min", code),
                max_amount=(
                    _config_decimal(b["max"], "max", code) if b.get("max") is not None else None
                ),
                rate=_config_decimal(b["rate"], "rate", code),
                flat_amount=_config_decimal(b.get("flat", 0), "flat", code),
            )
            for b in raw.get("brackets") or []
        )
    except (KeyError, TypeError, AttributeError) as e:
        raise ConfigurationError(f"malformed bracket: {e!r}", code) from e

    if rate is not None and rate < 0:
        raise ConfigurationError("rate must not be negative", code)
    for b in brackets:
        if b.rate < 0 or b.min_amount < 0 or b.flat_amount < 0:
            raise ConfigurationError("bracket values must not be negative", code)
        if b.max_amount is not None and b.max_amount <= b.min_amount:
            raise ConfigurationError("bracket 'max' must exceed 'min'", code)

    raw_exempt = raw.get("exempt_worker_types") or []
    if not isinstance(raw_exempt, list):
        raise ConfigurationError("'exempt_worker_types' must be a list", code)

    try:
        base = RuleBase(raw.get("base", RuleBase.GROSS.value))
        exempt = frozenset(WorkerType(w) for w in raw_exempt)
    except ValueError as e:
        raise ConfigurationError(str(e), code) from e

    return StatutoryRule(
        code=code,
        name=raw.get("name") or code,
        rate=rate,
        brackets=brackets,
        base=base,
        reduces_taxable=bool(raw.get("reduces_taxable", False)),
        employer=bool(raw.get("employer", False)),
        exempt_worker_types=exempt,
    )


def _config_decimal(value: Any, field_name: str, rule_code: str | None = None) -> Decimal:
    """Parse a config number; NaN and infinities are rejected."""
    if isinstance(value, bool) or not isinstance(value, (int, float, str, Decimal)):
        raise ConfigurationError(f"'{field_name}' must be a number", rule_code)
    try:
        result = Decimal(str(value))
    except InvalidOperation:
        raise ConfigurationError(
            f"'{field_name}' is not a number: {value!r}", rule_code
        ) from None
    if not result.is_finite():
        raise ConfigurationError(f"'{field_name}' must be a finite number", rule_code)
    return result


def _rule_to_payload(rule: StatutoryRule) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "code": rule.code,
        "name": rule.name,
        "base": rule.base.value,
        "reduces_taxable": rule.reduces_taxable,
        "employer": rule.employer,
        "exempt_worker_types": sorted(w.value for w in rule.exempt_worker_types),
    }
    if rule.rate is not None:
        payload["rate"] = str(rule.rate)
    else:
        payload["brackets"] = [
            {
                "min": str(b.min_amount),
                "max": str(b.max_amount) if b.max_amount is not None else None,
                "rate": str(b.rate),
                "flat": str(b.flat_amount),
            }
            for b in rule.brackets
        ]
    return payload


@dataclass(frozen=True)
class StatutoryLine:
    """One computed statutory amount."""

    code: str
    name: str
    amount: Decimal
    employer: bool = False


@dataclass(frozen=True)
class PayrollResult:
    """Result of computing pay for one employee.

    ``net_pay`` may be negative; ``is_negative`` flags it so callers can
    block payment or route it for review.
    """

    base_pay: Decimal
    gross_pay: Decimal
    total_deductions: Decimal
    net_pay: Decimal
    statutory_lines: tuple[StatutoryLine, ...] = ()
    employer_contributions: tuple[StatutoryLine, ...] = ()
    employee_id: str | None = None

    @property
    def is_negative(self) -> bool:
        return self.net_pay < 0

    @property
    def total_employer_contributions(self) -> Decimal:
        return sum((line.amount for line in self.employer_contributions), ZERO)

    def to_canonical_dict(self) -> dict[str, Any]:
        """Return canonical dict (deterministic ordering, amounts as strings)."""
        return {
            "employee_id": self.employee_id,
            "base_pay": str(self.base_pay),
            "gross_pay": str(self.gross_pay),
            "total_deductions": str(self.total_deductions),
            "net_pay": str(self.net_pay),
            "statutory_lines": [
                {"code": l.code, "amount": str(l.amount)} for l in self.statutory_lines
            ],
            "employer_contributions": [
                {"code": l.code, "amount": str(l.amount)} for l in self.employer_contributions
            ],
        }


@dataclass
class BatchCalculationResult:
    """Result of computing a batch of employees."""

    results: dict[str, PayrollResult] = field(default_factory=dict)
    errors: dict[str, PayrollValidationError] = field(default_factory=dict)
    total_gross: Decimal = ZERO
    total_net: Decimal = ZERO

    @property
    def error_count(self) -> int:
        return len(self.errors)
