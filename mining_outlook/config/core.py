"""Master configuration class composing all sub-configurations.

``Config`` gathers the run parameters, the caller-supplied economics, the
operating mine's stochastic inputs, the prospect mine's policies and the
logging settings. It loads from and saves to YAML and configures the
package logger.
"""

from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field
import yaml

from .economics import MineEconomicsConfig
from .presets import default_asset1_variables, default_asset2_policies
from .reporting import LoggingConfig
from .simulation import SimulationConfig
from .utils import deep_merge, load_yaml
from .variables import AssetPolicySpec, VariableSpec


def _default_asset2() -> Dict[str, AssetPolicySpec]:
    return {name: AssetPolicySpec(**spec) for name, spec in default_asset2_policies().items()}


class Config(BaseModel):
    """Complete configuration for a mine-outlook simulation.

    All sub-configs have defaults, so ``Config()`` with no arguments creates
    the gold-mine case study: 10,000 trials over 5 years.

    Examples:
        Override the run parameters::

            config = Config(simulation=SimulationConfig(trial_count=100_000, random_seed=1))

        Load a file, keeping defaults for missing sections::

            config = Config.from_yaml(Path("gold_mine.yaml"))

        Change one PERT triple of the case study::

            config = Config.from_dict(
                {"asset1": {"gold_price": {"init": [1400, 2000, 1700]}}}, Config()
            )
    """

    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    economics: MineEconomicsConfig = Field(default_factory=MineEconomicsConfig)
    asset1: Dict[str, VariableSpec] = Field(
        default_factory=default_asset1_variables,
        description="Stochastic inputs of the operating mine",
    )
    asset2: Dict[str, AssetPolicySpec] = Field(
        default_factory=_default_asset2,
        description="Relation of the prospect mine's inputs to the operating mine's",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_yaml(cls, path: Path, base_config: Optional["Config"] = None) -> "Config":
        """Load configuration from a YAML file.

        Without ``base_config`` each section in the file replaces the default
        section; an ``asset1`` mapping therefore lists every variable. With
        ``base_config`` the file is merged into it key by key.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValidationError: If a value has the wrong type or range.
        """
        return cls.from_dict(load_yaml(path), base_config)

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base_config: Optional["Config"] = None) -> "Config":
        """Create config from a dictionary, optionally merged into ``base_config``."""
        if base_config is None:
            return cls(**data)
        return cls(**deep_merge(base_config.model_dump(mode="json"), data))

    def to_yaml(self, path: Path) -> None:
        """Save configuration to a YAML file, creating parent directories."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump(self.model_dump(mode="json"), f, sort_keys=False)

    def setup_logging(self) -> "logging.Logger":
        """Attach handlers to the package logger as described by ``logging``.

        Existing handlers on that logger are replaced, so calling this twice
        does not duplicate output.

        Returns:
            The configured logger.
        """
        # `logging` is a field name in the class body
        import logging
        import sys

        settings = self.logging
        logger = logging.getLogger(settings.logger_name)
        if not settings.enabled:
            return logger

        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(settings.level)

        handlers: list = []
        if settings.console_output:
            handlers.append(logging.StreamHandler(sys.stdout))
        if settings.log_file:
            log_path = Path(settings.log_file)
            log_path.parent.mkdir(parents=True, exist_ok=True)
            handlers.append(logging.FileHandler(log_path, mode=settings.file_mode))

        formatter = logging.Formatter(settings.format)
        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        if settings.capture_warnings:
            logging.captureWarnings(True)
            warnings_logger = logging.getLogger("py.warnings")
            for handler in handlers:
                warnings_logger.addHandler(handler)
        return logger
