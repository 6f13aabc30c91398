"""Configuration for the policy cost curve calculation."""
from __future__ import annotations

import math
import tomllib
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from definitions import PROJECT_ROOT

DEFAULT_CONFIG_PATH = Path(PROJECT_ROOT, "config", "run_config.toml")

# Table holding the calculator settings; top-level keys are accepted too.
CONFIG_SECTION = "cost_curves"

# Legacy key names accepted as aliases for each setting.
_ALIASES: dict[str, tuple[str, ...]] = {
    "gas": ("gas", "AbatedGasForCostCurves"),
    "num_points": ("num_points", "numPointsForCO2CostCurve"),
    "discount_rate": ("discount_rate", "discountRate"),
    "discount_start_year": ("discount_start_year", "discount-start-year"),
    "market_region": ("market_region",),
    "output_file_template": ("output_file_template", "costCurvesOutputFileName"),
}


class ConfigError(ValueError):
    """Configuration error raised when cost curve settings are invalid."""


def load_config_data(config_source: Any | None = None) -> dict[str, Any]:
    """Return the configuration mapping read from ``config_source``.

    ``config_source`` may be ``None`` (the default config file), a mapping, a
    path to a TOML file, raw TOML text or bytes, or a readable file object.
    """

    if config_source is None:
        with open(DEFAULT_CONFIG_PATH, "rb") as src:
            return tomllib.load(src)

    if isinstance(config_source, Mapping):
        return dict(config_source)

    if isinstance(config_source, (bytes, bytearray)):
        return tomllib.loads(config_source.decode("utf-8"))

    if isinstance(config_source, (str, Path)):
        path_candidate = Path(config_source)
        if path_candidate.exists():
            with open(path_candidate, "rb") as src:
                return tomllib.load(src)
        return tomllib.loads(str(config_source))

    if hasattr(config_source, "read"):
        data = config_source.read()
        if isinstance(data, bytes):
            return tomllib.loads(data.decode("utf-8"))
        return tomllib.loads(str(data))

    raise TypeError(f"Unsupported config source type: {type(config_source)!r}")


def _lookup(config: Mapping[str, Any], field_name: str) -> Any:
    for key in _ALIASES[field_name]:
        if key in config and config[key] not in (None, ""):
            return config[key]
    return None


@dataclass(frozen=True)
class CostCurveConfig:
    """Validated settings for :class:`engine.total_policy_cost.TotalPolicyCostCalculator`.

    Attributes
    ----------
    gas:
        Gas whose abatement is costed.
    num_points:
        Number of swept trials; the baseline run adds one more point.
    discount_rate:
        Annual discount rate applied to regional cost streams.
    discount_start_year:
        Year costs are integrated and discounted from.
    market_region:
        Region whose policy market price decides whether a policy is active.
    output_file_template:
        Name of the XML output file; ``{scenario}`` is replaced by the
        scenario name.
    """

    gas: str = "CO2"
    num_points: int = 5
    discount_rate: float = 0.05
    discount_start_year: int = 2005
    market_region: str = "USA"
    output_file_template: str = "cost_curves_{scenario}.xml"

    def __post_init__(self) -> None:
        if not isinstance(self.gas, str) or not self.gas.strip():
            raise ConfigError("gas must be a non-empty string")
        object.__setattr__(self, "gas", self.gas.strip())

        if isinstance(self.num_points, bool):
            raise ConfigError("num_points must be an integer")
        try:
            num_points = int(self.num_points)
        except (TypeError, ValueError, OverflowError) as exc:
            raise ConfigError(f"num_points must be an integer (received {self.num_points!r})") from exc
        if isinstance(self.num_points, float) and not self.num_points.is_integer():
            raise ConfigError(f"num_points must be an integer (received {self.num_points!r})")
        if num_points < 1:
            raise ConfigError(f"num_points must be a positive integer (received {self.num_points!r})")
        object.__setattr__(self, "num_points", num_points)

        try:
            rate = float(self.discount_rate)
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                f"discount_rate must be numeric (received {self.discount_rate!r})"
            ) from exc
        if not math.isfinite(rate) or rate <= -1.0:
            raise ConfigError(f"discount_rate must be finite and greater than -1 (received {rate!r})")
        object.__setattr__(self, "discount_rate", rate)

        try:
            start_year = int(self.discount_start_year)
        except (TypeError, ValueError) as exc:
            raise ConfigError(
                f"discount_start_year must be an integer (received {self.discount_start_year!r})"
            ) from exc
        object.__setattr__(self, "discount_start_year", start_year)

        if not isinstance(self.market_region, str) or not self.market_region.strip():
            raise ConfigError("market_region must be a non-empty string")

        if not isinstance(self.output_file_template, str) or not self.output_file_template.strip():
            raise ConfigError("output_file_template must be a non-empty string")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any] | None) -> "CostCurveConfig":
        """Return settings from ``config``, reading the ``[cost_curves]`` table when present."""

        if config is None:
            return cls()
        if not isinstance(config, Mapping):
            raise ConfigError("configuration must be a mapping")
        section = config.get(CONFIG_SECTION, config)
        if not isinstance(section, Mapping):
            raise ConfigError(f"[{CONFIG_SECTION}] must be a table")

        values: dict[str, Any] = {}
        for field_name in _ALIASES:
            value = _lookup(section, field_name)
            if value is not None:
                values[field_name] = value
        return cls(**values)

    @classmethod
    def load(cls, config_source: Any | None = None) -> "CostCurveConfig":
        """Read and validate settings from any source accepted by :func:`load_config_data`."""

        return cls.from_mapping(load_config_data(config_source))

    def output_file_name(self, scenario_name: str) -> str:
        """Return the XML output file name for ``scenario_name``."""

        return self.output_file_template.replace("{scenario}", str(scenario_name))


__all__ = [
    "CONFIG_SECTION",
    "ConfigError",
    "CostCurveConfig",
    "DEFAULT_CONFIG_PATH",
    "load_config_data",
]
