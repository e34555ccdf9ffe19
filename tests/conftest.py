"""
Shared fixtures: a pinned projection config, a controllable clock for the
cache, and a handful of representative scenarios.
"""

import pandas as pd
import pytest

from core.config import EngineConfig, ProjectionConfig
from core.schema import Scenario


class FakeClock:
    """Monotonic clock the tests advance by hand."""

    def __init__(self, start: float = 1000.0):
        self.now = float(start)

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def projection_config():
    return ProjectionConfig(as_of_date=pd.Timestamp("2024-03-15"), seed=11)


@pytest.fixture
def engine_config(projection_config):
    return EngineConfig(projection=projection_config)


@pytest.fixture
def sample_accounts():
    return {"checking": 29.22, "creditCards": -20361}


def make_scenario(
    scenario_id,
    template_type,
    parameters,
    *,
    is_active=True,
    last_modified="2024-03-01T10:00:00",
):
    return Scenario(
        id=scenario_id,
        name=f"Scenario {scenario_id}",
        template_type=template_type,
        parameters=parameters,
        is_active=is_active,
        created_at=pd.Timestamp("2024-02-01"),
        last_modified=pd.Timestamp(last_modified),
    )


@pytest.fixture
def salary_scenario():
    return make_scenario("sc_salary", "salary_increase", {"increaseAmount": "500"})


@pytest.fixture
def purchase_scenario():
    return make_scenario(
        "sc_purchase",
        "major_purchase",
        {"downPayment": 2000, "monthlyPayment": 300, "loanTermMonths": 12},
    )


@pytest.fixture
def job_loss_scenario():
    return make_scenario(
        "sc_job", "job_loss", {"lostMonthlyIncome": 4000, "unemploymentBenefit": 1500, "durationMonths": 3}
    )


@pytest.fixture
def debt_scenario():
    return make_scenario(
        "sc_debt", "debt_payoff", {"currentBalance": 6000, "currentPayment": 200, "newPayment": 500}
    )


@pytest.fixture
def emergency_scenario():
    return make_scenario(
        "sc_fund", "emergency_fund", {"targetAmount": 3000, "monthlyContribution": 250}
    )
