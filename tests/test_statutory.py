"""Unit tests for statutory rule calculation and config parsing."""

from decimal import Decimal

import pytest

from hrms_engine.calculators import (
    ConfigurationError,
    PayrollConfig,
    StatutoryCalculator,
    StatutoryRule,
    TaxBracket,
    WorkerType,
)
from hrms_engine.calculators.types import RuleBase


def _brackets(*rows):
    return tuple(
        TaxBracket(
            min_amount=Decimal(lo),
            max_amount=Decimal(hi) if hi is not None else None,
            rate=Decimal(rate),
            flat_amount=Decimal(flat),
        )
        for lo, hi, rate, flat in rows
    )


class TestFlatRate:
    """Flat-rate rules."""

    def test_flat_rate_on_gross(self):
        calc = StatutoryCalculator(PayrollConfig.flat_rate("0.05", code="NAPSA"))
        lines, employer = calc.calculate(Decimal("4000.00"), WorkerType.SALARIED)

        assert [(l.code, l.amount) for l in lines] == [("NAPSA", Decimal("200.00"))]
        assert employer == []

    def test_zero_gross_gives_zero(self):
        calc = StatutoryCalculator(PayrollConfig.flat_rate("0.05"))
        lines, _ = calc.calculate(Decimal("0"), WorkerType.SALARIED)

        assert lines[0].amount == Decimal("0.00")


class TestProgressiveTax:
    """Bracketed rules tax each slice of wages at its own rate."""

    def test_slices_across_brackets(self):
        """2500 = 1000 at 0% + 1000 at 10% + 500 at 20%."""
        rule = StatutoryRule(
            code="PAYE",
            name="PAYE",
            brackets=_brackets(
                ("0", "1000", "0", "0"),
                ("1000", "2000", "0.10", "0"),
                ("2000", None, "0.20", "0"),
            ),
        )
        calc = StatutoryCalculator(PayrollConfig(rules=(rule,)))

        assert calc.calculate_rule(Decimal("2500"), rule) == Decimal("200.00")

    def test_wages_on_bracket_boundary(self):
        """Wages exactly at a bracket minimum pay nothing in that bracket."""
        rule = StatutoryRule(
            code="PAYE",
            name="PAYE",
            brackets=_brackets(("0", "1000", "0", "0"), ("1000", None, "0.30", "0")),
        )
        calc = StatutoryCalculator(PayrollConfig(rules=(rule,)))

        assert calc.calculate_rule(Decimal("1000"), rule) == Decimal("0.00")

    def test_flat_amount_added_once_bracket_reached(self):
        rule = StatutoryRule(
            code="PAYE",
            name="PAYE",
            brackets=_brackets(("0", "1000", "0", "0"), ("1000", None, "0.10", "50")),
        )
        calc = StatutoryCalculator(PayrollConfig(rules=(rule,)))

        assert calc.calculate_rule(Decimal("1500"), rule) == Decimal("100.00")
        assert calc.calculate_rule(Decimal("900"), rule) == Decimal("0.00")

    def test_unsorted_brackets(self):
        """Bracket order in the config does not matter."""
        rule = StatutoryRule(
            code="PAYE",
            name="PAYE",
            brackets=_brackets(("1000", None, "0.10", "0"), ("0", "1000", "0", "0")),
        )
        calc = StatutoryCalculator(PayrollConfig(rules=(rule,)))

        assert calc.calculate_rule(Decimal("3000"), rule) == Decimal("200.00")


class TestTaxableBase:
    """Rules applied to gross minus earlier pre-tax deductions."""

    def test_taxable_base_without_reductions_equals_gross(self):
        config = PayrollConfig(
            rules=(
                StatutoryRule(code="TAX", name="Tax", rate=Decimal("0.1"), base=RuleBase.TAXABLE),
            )
        )
        lines, _ = StatutoryCalculator(config).calculate(Decimal("1000"), WorkerType.SALARIED)

        assert lines[0].amount == Decimal("100.00")

    def test_only_earlier_reducing_rules_count(self):
        """A reducing rule after the tax rule does not change the tax."""
        config = PayrollConfig(
            rules=(
                StatutoryRule(
                    code="PENSION", name="Pension", rate=Decimal("0.05"), reduces_taxable=True
                ),
                StatutoryRule(code="TAX", name="Tax", rate=Decimal("0.2"), base=RuleBase.TAXABLE),
                StatutoryRule(
                    code="UNION", name="Union dues", rate=Decimal("0.01"), reduces_taxable=True
                ),
            )
        )
        lines, _ = StatutoryCalculator(config).calculate(Decimal("1000"), WorkerType.SALARIED)

        amounts = {l.code: l.amount for l in lines}
        assert amounts == {
            "PENSION": Decimal("50.00"),
            "TAX": Decimal("190.00"),
            "UNION": Decimal("10.00"),
        }

    def test_employer_rule_never_reduces_taxable(self):
        config = PayrollConfig(
            rules=(
                StatutoryRule(
                    code="ER",
                    name="Employer",
                    rate=Decimal("0.5"),
                    employer=True,
                    reduces_taxable=True,
                ),
                StatutoryRule(code="TAX", name="Tax", rate=Decimal("0.1"), base=RuleBase.TAXABLE),
            )
        )
        lines, employer = StatutoryCalculator(config).calculate(
            Decimal("1000"), WorkerType.SALARIED
        )

        assert [(l.code, l.amount) for l in lines] == [("TAX", Decimal("100.00"))]
        assert [(l.code, l.amount, l.employer) for l in employer] == [
            ("ER", Decimal("500.00"), True)
        ]


class TestConfigPayload:
    """Parsing stored/submitted configuration."""

    def test_round_trip(self, statutory_config):
        """A serialized config parses back to an equal config."""
        assert PayrollConfig.from_payload(statutory_config.to_payload()) == statutory_config

    def test_parsed_fields(self, statutory_config):
        pension, health, paye, employer = statutory_config.rules

        assert pension.rate == Decimal("0.05")
        assert pension.reduces_taxable
        assert pension.exempt_worker_types == frozenset({WorkerType.CONTRACTOR})
        assert health.base == RuleBase.GROSS
        assert paye.base == RuleBase.TAXABLE
        assert paye.brackets[1].max_amount is None
        assert employer.employer
        assert statutory_config.daily_target_hours == Decimal("8")

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"rules": "PAYE"},
            {"rules": ["PAYE"]},
            {"rules": [{"name": "No code", "rate": "0.1"}]},
            {"rules": [{"code": "X"}]},
            {"rules": [{"code": "X", "rate": "0.1", "brackets": [{"min": 0, "rate": 0}]}]},
            {"rules": [{"code": "X", "rate": "-0.1"}]},
            {"rules": [{"code": "X", "rate": "ten percent"}]},
            {"rules": [{"code": "X", "brackets": [{"min": 0}]}]},
            {"rules": [{"code": "X", "brackets": [{"min": 100, "max": 50, "rate": 0}]}]},
            {"rules": [{"code": "X", "rate": "0.1", "base": "net"}]},
            {"rules": [{"code": "X", "rate": "0.1", "exempt_worker_types": ["Intern"]}]},
            {"rules": [{"code": "X", "rate": "0.1"}, {"code": "X", "rate": "0.2"}]},
            {"rules": [{"code": "X", "rate": "NaN"}]},
            {"rules": [{"code": "X", "rate": "Infinity"}]},
            {"rules": [{"code": "X", "rate": "-Infinity"}]},
            {"rules": [{"code": "X", "rate": True}]},
            {"rules": [{"code": "X", "brackets": [{"min": 0, "rate": "NaN"}]}]},
            {"rules": [{"code": "X", "brackets": [{"min": "sNaN", "rate": 0}]}]},
            {"rules": [{"code": "X", "brackets": [{"min": 0, "max": "Infinity", "rate": 0}]}]},
            {"rules": [{"code": "X", "brackets": [{"min": 0, "rate": 0, "flat": "NaN"}]}]},
            {"rules": [{"code": "X", "brackets": "0-1000"}]},
            {"rules": [{"code": "X", "rate": "0.1", "exempt_worker_types": 5}]},
            {"rules": [{"code": "X", "rate": "0.1", "exempt_worker_types": "Contractor"}]},
            {"rules": [], "daily_target_hours": "abc"},
            {"rules": [], "daily_target_hours": "NaN"},
            {"rules": [], "daily_target_hours": -1},
        ],
    )
    def test_invalid_payloads_rejected(self, payload):
        """Malformed rules raise ConfigurationError."""
        with pytest.raises(ConfigurationError):
            PayrollConfig.from_payload(payload)

    def test_error_names_rule(self):
        with pytest.raises(ConfigurationError) as exc_info:
            PayrollConfig.from_payload({"rules": [{"code": "NHIMA", "rate": "-1"}]})

        assert exc_info.value.rule_code == "NHIMA"
        assert "NHIMA" in str(exc_info.value)

    def test_non_finite_rate_names_rule(self):
        """NaN and infinite rates never reach the calculator."""
        with pytest.raises(ConfigurationError) as exc_info:
            PayrollConfig.from_payload({"rules": [{"code": "NAPSA", "rate": "Infinity"}]})

        assert exc_info.value.rule_code == "NAPSA"
        assert "finite" in str(exc_info.value)

    def test_daily_target_hours_parsed(self):
        config = PayrollConfig.from_payload({"rules": [], "daily_target_hours": "7.5"})

        assert config.daily_target_hours == Decimal("7.5")
