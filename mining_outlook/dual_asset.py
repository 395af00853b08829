"""Second-asset environments built from the first asset's environment.

The prospect mine found through exploration is described by the same kind
of variable tables as the operating mine. Each of its variables follows an
explicit policy relative to the operating mine:

- shared: the very same table (perfect correlation within a trial),
- independent: fresh draws from the operating mine's PERT spec (same
  marginal distribution, zero correlation),
- derived: a deterministic function of the operating mine's table.

Variables that form the prospect's own output curve only start once it is
discovered; :func:`time_shift` moves each trial's curve so that the asset's
own year 1 lands on the trial's start year.
"""

from dataclasses import dataclass
from enum import Enum
import logging
from typing import Callable, Dict, List, Mapping, Optional, Union

import numpy as np

from .config.variables import AssetPolicySpec, VariableSpec
from .environment import Environment, EnvironmentGenerator, resolve_specs
from .exceptions import InvalidEnvironment

logger = logging.getLogger(__name__)


class PolicyKind(str, Enum):
    SHARED = "shared"
    INDEPENDENT = "independent"
    DERIVED = "derived"


@dataclass(frozen=True)
class Scale:
    """Picklable ``x -> factor * x`` used by scaled derived variables."""

    factor: float

    def __call__(self, table: np.ndarray) -> np.ndarray:
        return self.factor * table


@dataclass(frozen=True)
class AssetVariablePolicy:
    """How one second-asset variable is obtained.

    Attributes:
        kind: Shared, independent redraw or derived.
        function: Elementwise function of the first asset's table, for
            derived variables.
        follows_discovery: Whether :meth:`DualAssetBuilder.shifted` moves the
            variable to start at discovery. Defaults to ``True`` only for
            independent redraws.
    """

    kind: PolicyKind
    function: Optional[Callable[[np.ndarray], np.ndarray]] = None
    follows_discovery: Optional[bool] = None

    def __post_init__(self):
        if self.kind is PolicyKind.DERIVED and self.function is None:
            raise InvalidEnvironment("Derived variables need a function")
        if self.follows_discovery is None:
            object.__setattr__(self, "follows_discovery", self.kind is PolicyKind.INDEPENDENT)


def Shared() -> AssetVariablePolicy:
    return AssetVariablePolicy(PolicyKind.SHARED)


def Redraw(follows_discovery: bool = True) -> AssetVariablePolicy:
    return AssetVariablePolicy(PolicyKind.INDEPENDENT, follows_discovery=follows_discovery)


def Derived(
    function: Callable[[np.ndarray], np.ndarray], follows_discovery: bool = False
) -> AssetVariablePolicy:
    return AssetVariablePolicy(PolicyKind.DERIVED, function, follows_discovery)


def time_shift(table: np.ndarray, start_year: Union[int, np.ndarray]) -> np.ndarray:
    """Shift each trial's curve so that its own year 1 falls on ``start_year``.

    Args:
        table: Trial-by-year table indexed by the asset's own years.
        start_year: Global 1-based year in which the asset's year 1 happens,
            per trial or as a scalar. ``0`` (or anything past the horizon)
            means the asset never starts.

    Returns:
        Table indexed by global years; years before the start are zero.

    Examples:
        >>> time_shift(np.array([[1.0, 2.0, 3.0]]), 2)
        array([[0., 1., 2.]])
    """
    trial_count, year_count = table.shape
    start = np.broadcast_to(np.asarray(start_year, dtype=np.int64), (trial_count,))
    years = np.arange(1, year_count + 1)
    own_index = years[None, :] - start[:, None]
    active = (start[:, None] >= 1) & (own_index >= 0)
    shifted = np.take_along_axis(table, np.clip(own_index, 0, year_count - 1), axis=1)
    return np.where(active, shifted, 0.0)


class DualAssetBuilder:
    """Resolve a name-to-policy mapping into the second asset's environment.

    Args:
        policies: Variable name to policy.
        asset: Label of the second asset; keys its random sub-streams.

    Examples:
        Share the price, redraw production, halve the cost::

            builder = DualAssetBuilder({
                "gold_price": Shared(),
                "production": Redraw(),
                "equipment_labour_cost": Derived(Scale(0.5)),
            })
            asset2 = builder.build_second_asset(asset1, config.asset1, generator)
    """

    def __init__(self, policies: Mapping[str, AssetVariablePolicy], asset: str = "asset2"):
        if not policies:
            raise InvalidEnvironment("No second-asset variables configured")
        self.policies = dict(policies)
        self.asset = asset

    @classmethod
    def from_config(
        cls, specs: Mapping[str, AssetPolicySpec], asset: str = "asset2"
    ) -> "DualAssetBuilder":
        """Build from serializable policy specs (``shared``/``independent``/``scaled``)."""
        policies = {}
        for name, spec in specs.items():
            if spec.kind == "shared":
                policy = AssetVariablePolicy(PolicyKind.SHARED, None, spec.follows_discovery)
            elif spec.kind == "independent":
                policy = AssetVariablePolicy(PolicyKind.INDEPENDENT, None, spec.follows_discovery)
            else:
                policy = AssetVariablePolicy(
                    PolicyKind.DERIVED, Scale(spec.factor), spec.follows_discovery
                )
            policies[name] = policy
        return cls(policies, asset=asset)

    def _check(self, asset1_env: Environment, variable_specs: Mapping[str, VariableSpec]) -> None:
        issues: List[str] = []
        for name, policy in self.policies.items():
            if policy.kind is PolicyKind.INDEPENDENT:
                if name not in variable_specs:
                    issues.append(f"No spec to redraw '{name}' for {self.asset}")
            elif name not in asset1_env:
                issues.append(f"'{name}' is {policy.kind.value} but missing from asset 1")
        if issues:
            raise InvalidEnvironment(issues)

    def build_second_asset(
        self,
        asset1_env: Environment,
        variable_specs: Mapping[str, VariableSpec],
        generator: EnvironmentGenerator,
    ) -> Environment:
        """Construct the second asset's environment.

        Args:
            asset1_env: Environment of the first asset.
            variable_specs: Specs of the first asset; independent variables
                are redrawn from these.
            generator: Generator configured with the first asset's trial and
                year counts and seed.

        Returns:
            Environment labelled with this builder's asset, unshifted.

        Raises:
            InvalidEnvironment: If a policy references a missing variable or
                the generator's counts differ from the first asset's.
        """
        self._check(asset1_env, variable_specs)
        if (generator.trial_count, generator.year_count) != (
            asset1_env.trial_count,
            asset1_env.year_count,
        ):
            raise InvalidEnvironment(
                f"Generator is {generator.trial_count} x {generator.year_count} but asset 1 is "
                f"{asset1_env.trial_count} x {asset1_env.year_count}"
            )

        variables: Dict[str, np.ndarray] = {}
        redraw = {
            name: variable_specs[name]
            for name, policy in self.policies.items()
            if policy.kind is PolicyKind.INDEPENDENT
        }
        if redraw:
            fresh = generator.build_resolved(resolve_specs(redraw), asset=self.asset)
            variables.update(fresh.variables)

        for name, policy in self.policies.items():
            if policy.kind is PolicyKind.SHARED:
                variables[name] = asset1_env[name]
            elif policy.kind is PolicyKind.DERIVED:
                derived = np.asarray(policy.function(asset1_env[name]))  # type: ignore[misc]
                if derived.shape != asset1_env[name].shape:
                    raise InvalidEnvironment(
                        f"Derived '{name}' has shape {derived.shape}, "
                        f"expected {asset1_env[name].shape}"
                    )
                variables[name] = derived

        logger.debug(
            f"Built {self.asset}: "
            + ", ".join(f"{name}={policy.kind.value}" for name, policy in self.policies.items())
        )
        return Environment(
            {name: variables[name] for name in self.policies},
            asset=self.asset,
            follows_discovery=tuple(
                name for name, policy in self.policies.items() if policy.follows_discovery
            ),
        )

    @staticmethod
    def shifted(asset2_env: Environment, start_year: Union[int, np.ndarray]) -> Environment:
        """Shift the variables that follow discovery to start at ``start_year``."""
        return Environment(
            {
                name: (
                    time_shift(table, start_year)
                    if name in asset2_env.follows_discovery
                    else table
                )
                for name, table in asset2_env.variables.items()
            },
            asset=asset2_env.asset,
            follows_discovery=asset2_env.follows_discovery,
        )
