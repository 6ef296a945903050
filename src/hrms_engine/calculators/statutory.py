"""Statutory deduction calculation from configured rules."""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from hrms_engine.calculators.types import (
    ZERO,
    PayrollConfig,
    RuleBase,
    StatutoryLine,
    StatutoryRule,
    TaxBracket,
    WorkerType,
)

CENTS = Decimal("0.01")


def round_to_cents(amount: Decimal) -> Decimal:
    """Round amount to 2 decimal places (half-up)."""
    return amount.quantize(CENTS, rounding=ROUND_HALF_UP)


class StatutoryCalculator:
    """Applies a :class:`PayrollConfig` rule set to gross pay.

    Rules are applied in configured order. A rule with ``base=taxable`` is
    applied to gross pay minus the employee amounts of all earlier rules
    flagged ``reduces_taxable`` (e.g. income tax after pension). Employer
    rules produce liability lines only and never reduce the taxable base.

    Each line is rounded half-up to cents on its own, so the reported
    total always equals the sum of the reported lines.
    """

    def __init__(self, config: PayrollConfig):
        self.config = config

    def calculate(
        self, gross: Decimal, worker_type: WorkerType
    ) -> tuple[list[StatutoryLine], list[StatutoryLine]]:
        """Return (employee deduction lines, employer contribution lines)."""
        employee_lines: list[StatutoryLine] = []
        employer_lines: list[StatutoryLine] = []
        taxable = gross

        for rule in self.config.rules:
            if not rule.applies_to(worker_type):
                continue

            wages = gross if rule.base == RuleBase.GROSS else taxable
            amount = self.calculate_rule(wages, rule)
            line = StatutoryLine(
                code=rule.code, name=rule.name, amount=amount, employer=rule.employer
            )

            if rule.employer:
                employer_lines.append(line)
                continue

            employee_lines.append(line)
            if rule.reduces_taxable:
                taxable -= amount

        return employee_lines, employer_lines

    def calculate_rule(self, wages: Decimal, rule: StatutoryRule) -> Decimal:
        """Compute one rule's amount, rounded to cents."""
        if rule.rate is not None:
            return self._calculate_flat_tax(wages, rule.rate)
        return self._calculate_progressive_tax(wages, rule.brackets)

    def _calculate_flat_tax(self, wages: Decimal, rate: Decimal) -> Decimal:
        """Calculate flat-rate amount."""
        if wages <= 0:
            return ZERO.quantize(CENTS)
        return round_to_cents(wages * rate)

    def _calculate_progressive_tax(
        self, wages: Decimal, brackets: tuple[TaxBracket, ...]
    ) -> Decimal:
        """Calculate tax using progressive brackets.

        Each bracket taxes only the slice of wages between its ``min`` and
        ``max``; its ``flat`` amount is added once wages exceed ``min``.
        """
        if wages <= 0:
            return ZERO.quantize(CENTS)

        total_tax = ZERO
        for bracket in sorted(brackets, key=lambda b: b.min_amount):
            if wages <= bracket.min_amount:
                break

            upper = wages if bracket.max_amount is None else min(wages, bracket.max_amount)
            taxable_in_bracket = upper - bracket.min_amount
            total_tax += bracket.flat_amount + taxable_in_bracket * bracket.rate

        return round_to_cents(total_tax)
