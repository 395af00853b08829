"""Default parameters of the gold-mine case study.

The operating mine sells gold at an uncertain price, produces an uncertain
and declining quantity, pays uncertain equipment and labour costs, and owns
a leased property whose profit and community-relations workload are also
uncertain. A second mine may be found through exploration; it shares the
gold price and interest rate with the first mine, redraws its own
production, and runs at half the first mine's equipment and labour cost.
"""

from typing import Dict

from .variables import DependencyKind, PERTSpec, VariableSpec

GOLD_PRICE = "gold_price"
PRODUCTION = "production"
EQUIPMENT_LABOUR_COST = "equipment_labour_cost"
REPUTATION_DAYS = "reputation_days"
LEASE_PROFIT = "lease_profit"
INTEREST_RATE = "interest_rate"


def default_asset1_variables() -> Dict[str, VariableSpec]:
    """Stochastic inputs of the operating mine."""
    return {
        GOLD_PRICE: VariableSpec(
            kind=DependencyKind.ADDITIVE,
            init=PERTSpec(minimum=1500, maximum=1900, mode=1700),
            delta=PERTSpec(minimum=-100, maximum=500, mode=100),
            description="Gold price in $/oz; yearly change in $/oz",
        ),
        PRODUCTION: VariableSpec(
            kind=DependencyKind.AUTOREGRESSIVE,
            init=PERTSpec(minimum=2000, maximum=12000, mode=5000),
            delta=PERTSpec(minimum=0.80, maximum=1.10, mode=0.97),
            description="Ounces produced per year; year-on-year factor",
        ),
        EQUIPMENT_LABOUR_COST: VariableSpec(
            kind=DependencyKind.INDEPENDENT,
            init=PERTSpec(minimum=5_000_000, maximum=16_000_000, mode=7_500_000),
            description="Yearly equipment and labour cost in $",
        ),
        REPUTATION_DAYS: VariableSpec(
            kind=DependencyKind.INDEPENDENT,
            init=PERTSpec(minimum=10, maximum=100, mode=30),
            description="Days of community-relations work on the leased property",
        ),
        LEASE_PROFIT: VariableSpec(
            kind=DependencyKind.FIXED_BASE,
            init=PERTSpec(minimum=1_500_000, maximum=4_000_000, mode=2_500_000),
            delta=PERTSpec(minimum=0.80, maximum=1.40, mode=1.05),
            description="Yearly profit of the leased property; factor on year 1",
        ),
        INTEREST_RATE: VariableSpec(
            kind=DependencyKind.INDEPENDENT,
            init=PERTSpec(minimum=0.04, maximum=0.15, mode=0.07),
            description="Yearly interest rate charged on negative cash",
        ),
    }


def default_asset2_policies() -> Dict[str, Dict]:
    """How the prospect mine's inputs relate to the operating mine's."""
    return {
        GOLD_PRICE: {"kind": "shared"},
        INTEREST_RATE: {"kind": "shared"},
        PRODUCTION: {"kind": "independent"},
        EQUIPMENT_LABOUR_COST: {"kind": "scaled", "factor": 0.5},
    }
