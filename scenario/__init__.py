"""Simulation facade interfaces and stub implementations."""

from .interface import NO_MARKET_PRICE, RUN_ALL_PERIODS, Modeltime, SimulationFacade
from .stub import GLOBAL_REGION, RegionResponse, StubScenario

__all__ = [
    "GLOBAL_REGION",
    "Modeltime",
    "NO_MARKET_PRICE",
    "RUN_ALL_PERIODS",
    "RegionResponse",
    "SimulationFacade",
    "StubScenario",
]
