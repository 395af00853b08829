"""Trial-by-year tables of stochastic inputs.

An environment is the complete set of uncontrollable inputs of one asset:
one ``trial_count x year_count`` table per variable. Row ``i`` of every
table belongs to trial ``i``; cross-variable and cross-asset correlation is
expressed purely through that shared row index, so tables are never
reordered or filtered independently.

Randomness is partitioned into sub-streams keyed by
``(seed, asset, variable, trial block)``. A block's draws do not depend on
which worker produced it, so sequential and parallel generation give
bit-identical tables.
"""

from dataclasses import dataclass, field
import hashlib
import logging
from typing import Dict, Iterable, List, Mapping, Optional, Tuple, Union
import warnings

import numpy as np
import pandas as pd

from ._warnings import DataQualityWarning
from .config.variables import DependencyKind, VariableSpec
from .exceptions import InvalidEnvironment, InvalidParameters
from .parallel_executor import ParallelExecutor
from .pert import PERTParams

logger = logging.getLogger(__name__)

#: Per-trial per-year uniforms driving the exploration success draw.
EXPLORATION_DRAW = "exploration_draw"

ResolvedSpec = Tuple[DependencyKind, PERTParams, Optional[PERTParams]]


def year_frame(table: np.ndarray, name: Optional[str] = None) -> pd.DataFrame:
    """Wrap a trial-by-year table with a ``trial`` index and ``year`` columns 1..N."""
    trial_count, year_count = table.shape
    frame = pd.DataFrame(
        table,
        index=pd.RangeIndex(trial_count, name="trial"),
        columns=pd.Index(range(1, year_count + 1), name="year"),
    )
    if name is not None:
        frame.attrs["name"] = name
    return frame


def generate(
    trial_count: int,
    year_count: int,
    dependency_kind: Union[DependencyKind, str],
    init_params: PERTParams,
    delta_params: Optional[PERTParams] = None,
    rng: Optional[np.random.Generator] = None,
) -> np.ndarray:
    """Generate one variable table.

    Year 1 of every trial is drawn from ``init_params``. For chained kinds,
    each later year combines the same trial's earlier value with a fresh
    per-trial draw from ``delta_params``:

    - ``autoregressive``: ``x[t] = x[t-1] * d[t]``
    - ``fixed_base``: ``x[t] = x[1] * d[t]``
    - ``additive``: ``x[t] = x[t-1] + d[t]``

    Values are never clamped; negative results propagate unchanged.

    Args:
        trial_count: Number of rows.
        year_count: Number of columns.
        dependency_kind: Temporal dependency between years.
        init_params: Year-1 (or every-year, when independent) triple.
        delta_params: Yearly factor or amount for chained kinds.
        rng: Random generator to consume.

    Returns:
        Array of shape ``(trial_count, year_count)``.

    Raises:
        InvalidParameters: On non-positive counts, an unknown kind, or a
            chained kind without ``delta_params``.
    """
    if trial_count < 1 or year_count < 1:
        raise InvalidParameters(
            f"trial_count and year_count must be at least 1, got {trial_count} x {year_count}"
        )
    try:
        kind = DependencyKind(dependency_kind)
    except ValueError as e:
        raise InvalidParameters(f"Unknown dependency kind: {dependency_kind!r}") from e
    if kind.chained and delta_params is None:
        raise InvalidParameters(f"{kind.value} variables need delta parameters")
    if rng is None:
        rng = np.random.default_rng()

    if kind is DependencyKind.INDEPENDENT:
        return init_params.sample((trial_count, year_count), rng)

    table = np.empty((trial_count, year_count))
    table[:, 0] = init_params.sample(trial_count, rng)
    if year_count == 1:
        return table

    deltas = delta_params.sample((trial_count, year_count - 1), rng)  # type: ignore[union-attr]
    for t in range(1, year_count):
        d = deltas[:, t - 1]
        if kind is DependencyKind.AUTOREGRESSIVE:
            table[:, t] = table[:, t - 1] * d
        elif kind is DependencyKind.FIXED_BASE:
            table[:, t] = table[:, 0] * d
        else:
            table[:, t] = table[:, t - 1] + d
    return table


@dataclass
class Environment:
    """Named trial-by-year tables of one asset.

    Attributes:
        variables: Mapping of variable name to table.
        asset: Label of the asset the tables describe.
        follows_discovery: Variables forming the asset's own output curve,
            which start only once the asset is discovered.
    """

    variables: Dict[str, np.ndarray]
    asset: str = "asset1"
    follows_discovery: Tuple[str, ...] = ()
    _shape: Tuple[int, int] = field(init=False, repr=False)

    def __post_init__(self):
        self._shape = self.validate()

    def validate(self) -> Tuple[int, int]:
        """Check every table is two-dimensional and all share one shape.

        Returns:
            The common ``(trial_count, year_count)``.

        Raises:
            InvalidEnvironment: If there are no tables or shapes disagree.
        """
        if not self.variables:
            raise InvalidEnvironment(f"Environment '{self.asset}' has no variables")
        shapes = {name: np.shape(table) for name, table in self.variables.items()}
        issues = [f"{name} has {len(s)} dimensions" for name, s in shapes.items() if len(s) != 2]
        if issues:
            raise InvalidEnvironment(issues)
        distinct = set(shapes.values())
        if len(distinct) > 1:
            detail = ", ".join(f"{name}={s}" for name, s in shapes.items())
            raise InvalidEnvironment(f"Misaligned tables in '{self.asset}': {detail}")
        for name, table in self.variables.items():
            if not np.all(np.isfinite(table)):
                warnings.warn(
                    f"Variable '{name}' of '{self.asset}' contains non-finite values",
                    DataQualityWarning,
                    stacklevel=3,
                )
        return distinct.pop()  # type: ignore[return-value]

    @property
    def trial_count(self) -> int:
        return self._shape[0]

    @property
    def year_count(self) -> int:
        return self._shape[1]

    def __getitem__(self, name: str) -> np.ndarray:
        try:
            return self.variables[name]
        except KeyError:
            raise InvalidEnvironment(
                f"Environment '{self.asset}' has no variable '{name}'"
            ) from None

    def __contains__(self, name: str) -> bool:
        return name in self.variables

    def names(self) -> List[str]:
        return list(self.variables)

    def require(self, *names: str) -> None:
        """Raise :class:`InvalidEnvironment` listing every missing variable."""
        missing = [name for name in names if name not in self.variables]
        if missing:
            raise InvalidEnvironment(
                [f"Environment '{self.asset}' is missing '{name}'" for name in missing]
            )

    def trial_slice(self, start: int, stop: int) -> "Environment":
        """Rows ``start:stop`` of every table, keeping trial alignment."""
        return Environment(
            {name: table[start:stop] for name, table in self.variables.items()},
            asset=self.asset,
            follows_discovery=self.follows_discovery,
        )

    def to_frame(self, name: str) -> pd.DataFrame:
        return year_frame(self[name], name=name)


def stream_key(label: str) -> int:
    """Stable 32-bit integer for a sub-stream label."""
    return int.from_bytes(hashlib.sha256(label.encode("utf-8")).digest()[:4], "little")


def block_rng(seed: int, asset: str, variable: str, block: int) -> np.random.Generator:
    """Independent generator for one (asset, variable, trial block)."""
    sequence = np.random.SeedSequence([seed, stream_key(asset), stream_key(variable), block])
    return np.random.default_rng(sequence)


def _generate_block(
    block: Tuple[int, int, int],
    specs: Dict[str, ResolvedSpec],
    seed: int,
    asset: str,
    year_count: int,
    exploration: bool,
) -> Dict[str, np.ndarray]:
    """Generate every variable for rows ``start:stop`` of one trial block.

    Module-level so it can be pickled for worker processes.
    """
    index, start, stop = block
    n_rows = stop - start
    tables = {}
    for name, (kind, init, delta) in specs.items():
        rng = block_rng(seed, asset, name, index)
        tables[name] = generate(n_rows, year_count, kind, init, delta, rng=rng)
    if exploration:
        rng = block_rng(seed, asset, EXPLORATION_DRAW, index)
        tables[EXPLORATION_DRAW] = rng.random((n_rows, year_count))
    return tables


def resolve_specs(specs: Mapping[str, VariableSpec]) -> Dict[str, ResolvedSpec]:
    """Validate variable specs and convert them to PERT parameters.

    Raises:
        InvalidParameters: Listing every malformed triple or missing delta.
    """
    resolved: Dict[str, ResolvedSpec] = {}
    issues: List[str] = []
    for name, spec in specs.items():
        try:
            init = spec.init_params()
            delta = spec.delta_params()
        except InvalidParameters as e:
            issues.extend(f"{name}: {issue}" for issue in e.issues)
            continue
        if spec.kind.chained and delta is None:
            issues.append(f"{name}: {spec.kind.value} variable needs delta parameters")
            continue
        resolved[name] = (spec.kind, init, delta)
    if issues:
        raise InvalidParameters(issues)
    return resolved


class EnvironmentGenerator:
    """Build environments with per-block random sub-streams.

    Args:
        trial_count: Number of trials.
        year_count: Number of years.
        seed: Root seed; drawn from OS entropy and logged when omitted.
        block_size: Trials per sub-stream and per parallel work item.
        n_workers: Worker processes; ``1`` generates in-process.

    Examples:
        Two runs with the same seed give identical tables::

            gen = EnvironmentGenerator(100_000, 5, seed=42)
            env = gen.build(config.asset1)
    """

    def __init__(
        self,
        trial_count: int,
        year_count: int,
        seed: Optional[int] = None,
        block_size: int = 10_000,
        n_workers: Optional[int] = 1,
    ):
        if trial_count < 1 or year_count < 1:
            raise InvalidParameters(
                f"trial_count and year_count must be at least 1, got {trial_count} x {year_count}"
            )
        if block_size < 1:
            raise InvalidParameters(f"block_size must be at least 1, got {block_size}")
        if seed is None:
            seed = int(np.random.SeedSequence().entropy)  # type: ignore[arg-type]
            logger.info(f"No seed given, using entropy {seed}")
        self.trial_count = trial_count
        self.year_count = year_count
        self.seed = seed
        self.block_size = block_size
        self.executor = ParallelExecutor(n_workers=n_workers)

    def blocks(self) -> List[Tuple[int, int, int]]:
        """``(index, start, stop)`` row ranges covering every trial once."""
        return [
            (index, start, min(start + self.block_size, self.trial_count))
            for index, start in enumerate(range(0, self.trial_count, self.block_size))
        ]

    def build(
        self,
        specs: Mapping[str, VariableSpec],
        asset: str = "asset1",
        exploration: bool = True,
    ) -> Environment:
        """Generate every variable in ``specs``.

        Args:
            specs: Variable name to spec.
            asset: Asset label; part of every sub-stream key, so two assets
                with the same specs get independent draws.
            exploration: Also draw the exploration success uniforms.

        Returns:
            Environment with one table per variable.

        Raises:
            InvalidParameters: Before any draw, if any spec is malformed.
        """
        resolved = resolve_specs(specs)
        return self.build_resolved(resolved, asset=asset, exploration=exploration)

    def build_resolved(
        self,
        resolved: Dict[str, ResolvedSpec],
        asset: str = "asset1",
        exploration: bool = False,
    ) -> Environment:
        """Generate from already validated ``(kind, init, delta)`` triples."""
        logger.debug(
            f"Generating {len(resolved)} variables for {asset}: "
            f"{self.trial_count} trials x {self.year_count} years"
        )
        chunks = self.executor.map(
            _generate_block,
            self.blocks(),
            shared={
                "specs": resolved,
                "seed": self.seed,
                "asset": asset,
                "year_count": self.year_count,
                "exploration": exploration,
            },
        )
        names: Iterable[str] = chunks[0].keys()
        variables = {name: np.concatenate([chunk[name] for chunk in chunks]) for name in names}
        return Environment(variables, asset=asset)
