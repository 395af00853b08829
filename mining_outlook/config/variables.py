"""Stochastic input variable configuration.

Contains the pydantic models describing one uncertain input of the mine
model: its temporal dependency kind and the PERT triples used for the
year-1 draw and for the yearly change.
"""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, Field, model_validator

from ..pert import PERTParams


class DependencyKind(str, Enum):
    """How a variable's yearly values relate to each other.

    Attributes:
        INDEPENDENT: Every year is a fresh draw from ``init``.
        AUTOREGRESSIVE: Year t is year t-1 multiplied by a fresh ``delta`` factor.
        FIXED_BASE: Year t is year 1 multiplied by a fresh ``delta`` factor.
        ADDITIVE: Year t is year t-1 plus a fresh ``delta`` amount.
    """

    INDEPENDENT = "independent"
    AUTOREGRESSIVE = "autoregressive"
    FIXED_BASE = "fixed_base"
    ADDITIVE = "additive"

    @property
    def chained(self) -> bool:
        return self is not DependencyKind.INDEPENDENT


class PERTSpec(BaseModel):
    """Serializable PERT triple.

    Ordering is not checked here; :meth:`to_params` performs the domain
    validation and raises :class:`~mining_outlook.exceptions.InvalidParameters`
    so malformed triples surface with the same error wherever they come from.

    Examples:
        Mapping form::

            PERTSpec(minimum=-100, maximum=500, mode=100)

        Sequence form, convenient in YAML (``[min, max, mode]``)::

            PERTSpec.model_validate([-100, 500, 100])
    """

    minimum: float = Field(description="Lowest plausible value")
    maximum: float = Field(description="Highest plausible value")
    mode: float = Field(description="Most-likely value")

    @model_validator(mode="before")
    @classmethod
    def accept_sequence(cls, data: Any) -> Any:
        """Allow ``[minimum, maximum, mode]`` lists and tuples."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise ValueError(f"PERT triple needs 3 values, got {len(data)}")
            return {"minimum": data[0], "maximum": data[1], "mode": data[2]}
        return data

    def to_params(self) -> PERTParams:
        return PERTParams(minimum=self.minimum, maximum=self.maximum, mode=self.mode)


class VariableSpec(BaseModel):
    """One stochastic input variable.

    Attributes:
        kind: Temporal dependency between years.
        init: PERT triple for year 1 (every year for independent variables).
        delta: PERT triple for the yearly factor or amount of chained kinds.
        description: Free-text note carried into YAML files.
    """

    kind: DependencyKind = Field(default=DependencyKind.INDEPENDENT)
    init: PERTSpec
    delta: Optional[PERTSpec] = None
    description: str = ""

    def init_params(self) -> PERTParams:
        return self.init.to_params()

    def delta_params(self) -> Optional[PERTParams]:
        return self.delta.to_params() if self.delta is not None else None


class AssetPolicySpec(BaseModel):
    """Serializable relation of a second-asset variable to the first asset.

    Attributes:
        kind: ``shared`` (same table), ``independent`` (fresh draws from the
            first asset's spec) or ``scaled`` (first asset's table times
            ``factor``).
        factor: Multiplier used by ``scaled``.
        follows_discovery: Whether the variable is part of the asset's own
            output curve and is shifted to start at discovery. Defaults to
            ``True`` for ``independent`` and ``False`` otherwise.
    """

    kind: Literal["shared", "independent", "scaled"] = "shared"
    factor: float = 1.0
    follows_discovery: Optional[bool] = None
