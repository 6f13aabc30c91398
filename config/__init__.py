"""Configuration loading for the policy cost curve calculator."""

from .cost_curve_config import (
    ConfigError,
    CostCurveConfig,
    DEFAULT_CONFIG_PATH,
    load_config_data,
)

__all__ = ["ConfigError", "CostCurveConfig", "DEFAULT_CONFIG_PATH", "load_config_data"]
