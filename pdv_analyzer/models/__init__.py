from .config import STFTConfig
from .results import QuadratureResult, SpectrogramResult
from .signals import PhysicalConstants, ScenarioType, SignalTriple

__all__ = [
    "PhysicalConstants",
    "QuadratureResult",
    "ScenarioType",
    "SignalTriple",
    "SpectrogramResult",
    "STFTConfig",
]
