"""
Unit tests for boundary preparation.

Covers:
1. Account type aliases and snapshot building from several input shapes
2. Net worth and liability totals
3. Scenario records (camelCase, ISO timestamps, missing ids)
4. ValidationResult reporting for scenarios and accounts, grouped by subject
"""

import pandas as pd
import pytest

from core.schema import Account, AccountType
from data_prep.accounts import (
    accounts_to_dataframe,
    build_account_snapshot,
    canonicalize_account_type,
    compute_net_worth,
    total_liabilities,
)
from data_prep.scenarios import active_only, load_scenarios, scenario_from_record
from data_prep.validators import validate_accounts, validate_scenario, validate_scenarios

from .conftest import make_scenario


# =============================================================================
# ACCOUNTS
# =============================================================================

class TestAccountTypes:

    @pytest.mark.parametrize("raw, expected", [
        ("checking", AccountType.CHECKING),
        ("creditCards", AccountType.CREDIT_CARD),
        ("Credit Card", AccountType.CREDIT_CARD),
        ("credit-card", AccountType.CREDIT_CARD),
        ("heloc", AccountType.LINE_OF_CREDIT),
        ("lineOfCredit", AccountType.LINE_OF_CREDIT),
        ("Real Estate", AccountType.REAL_ESTATE),
        ("401k", AccountType.RETIREMENT),
        ("studentLoan", AccountType.STUDENT_LOAN),
        ("spaceship", None),
        (None, None),
    ])
    def test_canonicalize(self, raw, expected):
        assert canonicalize_account_type(raw) is expected


class TestSnapshot:

    def test_mapping_input(self):
        snapshot = build_account_snapshot({"checking": 29.22, "creditCards": -20361})
        assert compute_net_worth(snapshot) == pytest.approx(-20331.78)
        assert total_liabilities(snapshot) == pytest.approx(20361.0)

    def test_liability_sign_does_not_matter(self):
        a = build_account_snapshot({"savings": 1000, "mortgage": 400})
        b = build_account_snapshot({"savings": 1000, "mortgage": -400})
        assert compute_net_worth(a) == compute_net_worth(b) == pytest.approx(600.0)

    def test_mixed_records_and_accounts(self):
        snapshot = build_account_snapshot([
            Account(id="x", type=AccountType.SAVINGS, balance=250.0),
            {"accountId": "y", "accountType": "autoLoan", "balance": "$1,000"},
        ])
        assert [a.id for a in snapshot] == ["x", "y"]
        assert snapshot[1].type is AccountType.AUTO_LOAN
        assert compute_net_worth(snapshot) == pytest.approx(-750.0)

    def test_unknown_type_classified_by_sign(self, caplog):
        snapshot = build_account_snapshot({"mystery_debt": -300, "mystery_asset": 200})
        assert snapshot[0].is_liability
        assert not snapshot[1].is_liability
        assert any("Unknown account type" in r.getMessage() for r in caplog.records)

    def test_unparseable_balance_skipped(self):
        snapshot = build_account_snapshot([{"id": "a", "type": "checking", "balance": "n/a"}])
        assert snapshot == ()

    def test_empty_inputs(self):
        assert build_account_snapshot(None) == ()
        assert compute_net_worth(()) == 0.0

    def test_dataframe(self):
        df = accounts_to_dataframe(build_account_snapshot({"checking": 10, "credit_card": 5}))
        assert list(df.columns) == ["id", "type", "balance", "is_liability", "net_value"]
        assert df["net_value"].sum() == pytest.approx(5.0)


# =============================================================================
# SCENARIOS
# =============================================================================

class TestScenarioRecords:

    def test_camel_case_record(self):
        scenario = scenario_from_record({
            "id": 7,
            "name": "Raise",
            "templateType": "salary_increase",
            "parameters": {"increaseAmount": "500"},
            "isActive": "false",
            "createdAt": "2024-01-02T03:04:05Z",
            "lastModified": "2024-02-03T04:05:06Z",
        })
        assert scenario.id == "7"
        assert scenario.is_active is False
        assert scenario.last_modified.month == 2
        assert scenario.parameters == {"increaseAmount": "500"}

    def test_defaults(self):
        scenario = scenario_from_record({"id": "s"})
        assert scenario.template_type == "generic"
        assert scenario.is_active is True
        assert scenario.last_modified is None

    def test_bad_timestamp_ignored(self):
        scenario = scenario_from_record({"id": "s", "lastModified": "yesterday-ish"})
        assert scenario.last_modified is None

    def test_missing_id_raises(self):
        with pytest.raises(ValueError):
            scenario_from_record({"name": "no id"})

    def test_load_skips_bad_rows(self, salary_scenario):
        loaded = load_scenarios([{"id": "a"}, {"name": "no id"}, salary_scenario])
        assert [s.id for s in loaded] == ["a", "sc_salary"]

    def test_active_only(self, salary_scenario):
        off = make_scenario("off", "generic", {}, is_active=False)
        assert active_only([salary_scenario, off]) == [salary_scenario]


# =============================================================================
# VALIDATION
# =============================================================================

class TestValidation:

    def test_valid_scenario(self, purchase_scenario):
        result = validate_scenario(purchase_scenario)
        assert result.is_valid
        assert result.summary() == "1 checked, no problems found."

    def test_missing_required_field(self):
        scenario = make_scenario("e", "emergency_fund", {"targetAmount": 5000})
        result = validate_scenario(scenario)
        assert not result.is_valid
        assert any("monthly_contribution" in e or "monthlyContribution" in e for e in result.errors)

    def test_unknown_template_warns(self):
        result = validate_scenario(make_scenario("u", "timeTravel", {"monthlyAmount": 5}))
        assert result.is_valid
        assert result.warnings

    def test_duplicate_ids(self, salary_scenario):
        result = validate_scenarios([salary_scenario, salary_scenario])
        assert any("Duplicate" in w for w in result.warnings)

    def test_accounts(self):
        result = validate_accounts([
            {"id": "a", "type": "checking", "balance": "abc"},
            {"id": "b", "type": "spaceship", "balance": 10},
        ])
        assert len(result.errors) == 1
        assert len(result.warnings) == 1

    def test_no_accounts(self):
        assert validate_accounts(None).warnings
        assert validate_accounts({}).is_valid

    def test_non_mapping_parameters(self):
        result = validate_scenario(make_scenario("l", "salary_increase", ["increaseAmount", 500]))
        assert not result.is_valid
        assert "mapping" in result.errors[0]
        assert result.errors[0].startswith("l: ")

    def test_summary_groups_by_scenario(self):
        result = validate_scenarios([
            make_scenario("e", "emergency_fund", {"targetAmount": 5000}),
            make_scenario("u", "timeTravel", {"monthlyAmount": 5}),
        ])
        lines = result.summary().splitlines()
        assert lines[0] == "e: 1 error(s), 0 warning(s)"
        assert lines[1].startswith("  error: ")
        assert "u: 0 error(s), 1 warning(s)" in lines
        assert [i.subject for i in result.issues] == ["e", "u"]
        assert list(result.by_subject()) == ["e", "u"]

    def test_account_issues_name_the_account(self):
        result = validate_accounts([{"id": "a", "type": "checking", "balance": "abc"}])
        assert result.errors == ["account a: balance 'abc' is not numeric."]
