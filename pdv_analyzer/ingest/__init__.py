"""Ingest package - dataset interface and simulated datasets.

This package handles:
- Validating loader output (mapping or DataFrame) into a SimulationDataset
- Substituting documented defaults for missing physical constants
- Generating simulated three-detector datasets with a reference velocity

Design principle:
- Reading files is the loader's job; this package starts from in-memory data
- Auxiliary data (intensity variations) is passed through unmodified
"""

from .dataset import SimulationDataset, load_dataset
from .simulate import SimulationSettings, simulate_dataset

__all__ = [
    "SimulationDataset",
    "SimulationSettings",
    "load_dataset",
    "simulate_dataset",
]
