"""
Unit tests for projected scenario transactions.

Covers:
1. Per-rule dated entries: columns, booking days, categories, tags, kinds
2. Row counts agree with EffectResult.affected_transactions
3. Merging several scenarios into one date-ordered frame
4. Year-one / year-two impact summaries and transfers
5. Overlaying scenario rows on a baseline ledger
"""

import pandas as pd
import pytest

from analysis.transactions import (
    merge_scenario_transactions,
    overlay_on_ledger,
    summarize_transactions,
    transaction_impacts,
)
from core.schema import RiskLevel
from effects.base import TRANSACTION_COLUMNS
from effects.registry import compute_effect, get_rule, scenario_transactions

from .conftest import make_scenario


AS_OF = pd.Timestamp("2024-03-15")


# =============================================================================
# PER-RULE ENTRIES
# =============================================================================

class TestScheduledEntries:

    def test_salary_rows(self):
        frame = get_rule("salary_increase").transactions({"increaseAmount": 500}, 3, AS_OF, scenario_id="s")
        assert list(frame.columns) == TRANSACTION_COLUMNS
        assert list(frame["date"]) == [
            pd.Timestamp("2024-04-15"), pd.Timestamp("2024-05-15"), pd.Timestamp("2024-06-15"),
        ]
        assert (frame["amount"] == 500.0).all()
        assert set(frame["category"]) == {"Income"}
        assert set(frame["scenario_id"]) == {"s"}
        assert frame.loc[0, "tags"] == ("scenario", "salary_increase", "salary")

    def test_home_buying_rows(self):
        frame = get_rule("home_buying").transactions(
            {"homePrice": 400000, "downPayment": 80000}, 2, AS_OF,
        )
        assert list(frame["description"]) == [
            "Home Purchase - Down Payment",
            "Home Purchase - Closing Costs",
            "Mortgage Payment",
            "Property Tax",
            "Home Insurance",
        ]
        assert list(frame["date"].dt.day) == [1, 1, 1, 15, 20]
        assert frame.loc[1, "amount"] == pytest.approx(-10000.0)
        assert frame.loc[4, "category"] == "Insurance"

    def test_debt_payments_are_debt_kind(self, debt_scenario):
        frame = scenario_transactions(debt_scenario, 3, AS_OF)
        assert set(frame["kind"]) == {"debt"}
        assert (frame["amount"] == -300.0).all()
        assert (frame["date"].dt.day == 5).all()

    def test_investment_contributions_are_transfers(self):
        frame = get_rule("investment_strategy").transactions(
            {"monthlyContribution": 500, "expectedReturn": 6}, 3, AS_OF,
        )
        kinds = frame.groupby("kind").size()
        assert kinds["transfer"] == 3
        # growth starts once there is a balance
        assert kinds["cash"] == 2
        assert (frame.loc[frame["kind"] == "cash", "amount"] > 0).all()

    def test_expense_change_uses_category(self):
        frame = get_rule("expense_change").transactions(
            {"monthlyAmount": 80, "changeType": "add", "category": "Childcare"}, 1, AS_OF,
        )
        assert frame.loc[0, "description"] == "Increased Childcare Expense"
        assert frame.loc[0, "amount"] == pytest.approx(-80.0)

    def test_malformed_is_empty(self):
        for params in (["increaseAmount", 500], {"increaseAmount": "n/a"}):
            frame = get_rule("salary_increase").transactions(params, 12, AS_OF)
            assert frame.empty
            assert list(frame.columns) == TRANSACTION_COLUMNS

    @pytest.mark.parametrize("fixture, months", [
        ("purchase_scenario", 36),
        ("debt_scenario", 36),
        ("emergency_scenario", 36),
        ("salary_scenario", 12),
        ("job_loss_scenario", 12),
    ])
    def test_rows_match_affected_transactions(self, request, fixture, months):
        scenario = request.getfixturevalue(fixture)
        result = compute_effect(scenario.template_type, scenario.parameters, as_of=AS_OF)
        assert len(scenario_transactions(scenario, months, AS_OF)) == result.affected_transactions


# =============================================================================
# MERGE AND IMPACT
# =============================================================================

class TestMergeAndImpact:

    def test_merge_orders_by_date(self, salary_scenario, purchase_scenario, debt_scenario):
        merged = merge_scenario_transactions([salary_scenario, purchase_scenario, debt_scenario], 12, AS_OF)
        assert merged["date"].is_monotonic_increasing
        assert set(merged["scenario_id"]) == {"sc_salary", "sc_purchase", "sc_debt"}
        # purchase: down payment plus 11 monthly payments inside 12 months
        assert len(merged) == 12 + 12 + 12

    def test_inactive_and_malformed_add_nothing(self, salary_scenario):
        off = make_scenario("off", "salary_increase", {"increaseAmount": 100}, is_active=False)
        bad = make_scenario("bad", "salary_increase", ["increaseAmount", 100])
        merged = merge_scenario_transactions([salary_scenario, off, bad], 12, AS_OF)
        assert set(merged["scenario_id"]) == {"sc_salary"}
        assert merge_scenario_transactions([], 12, AS_OF).empty

    def test_year_one_and_year_two(self, salary_scenario):
        impact = transaction_impacts([salary_scenario], 24, AS_OF)["sc_salary"]
        assert impact.total_transactions == 24
        assert impact.year_one_impact == pytest.approx(6000.0)
        assert impact.year_two_impact == pytest.approx(6000.0)
        assert impact.net_effect == pytest.approx(12000.0)
        assert impact.monthly_change == pytest.approx(500.0)
        assert impact.affected_categories == ("Income",)
        assert impact.risk_level is RiskLevel.LOW

    def test_transfers_listed_but_not_counted(self):
        scenario = make_scenario("i", "investment_strategy", {"monthlyContribution": 500, "expectedReturn": 0})
        impact = transaction_impacts([scenario], 12, AS_OF)["i"]
        assert impact.total_transactions == 12
        assert impact.year_one_impact == 0.0
        assert impact.affected_categories == ("Investment",)

    def test_home_purchase_is_high_impact(self):
        scenario = make_scenario("h", "home_buying", {"homePrice": 400000, "downPayment": 80000})
        impact = transaction_impacts([scenario], 12, AS_OF)["h"]
        assert impact.year_one_impact < -90000.0
        assert impact.affected_categories == ("Housing", "Insurance")
        assert impact.risk_level is RiskLevel.HIGH

    def test_empty_summary(self):
        impact = summarize_transactions(pd.DataFrame(columns=TRANSACTION_COLUMNS), AS_OF, "x")
        assert impact.total_transactions == 0
        assert impact.net_effect == 0.0


# =============================================================================
# LEDGER OVERLAY
# =============================================================================

class TestLedgerOverlay:

    def test_scenario_rows_interleave_with_ledger(self, salary_scenario):
        ledger = pd.DataFrame({
            "date": ["2024-03-01", "2024-04-20"],
            "description": ["Rent", "Groceries"],
            "category": ["Housing", "Food"],
            "amount": [-1500.0, -200.0],
        })
        merged = merge_scenario_transactions([salary_scenario], 1, AS_OF)
        out = overlay_on_ledger(ledger, merged)
        assert list(out["description"]) == ["Rent", "Salary Increase - Additional Income", "Groceries"]
        assert list(out["is_scenario"]) == [False, True, False]

    def test_no_ledger(self, salary_scenario):
        out = overlay_on_ledger(None, merge_scenario_transactions([salary_scenario], 2, AS_OF))
        assert len(out) == 2
        assert out["is_scenario"].all()

    def test_ledger_missing_columns(self):
        with pytest.raises(ValueError):
            overlay_on_ledger(pd.DataFrame({"date": []}), pd.DataFrame(columns=TRANSACTION_COLUMNS))
