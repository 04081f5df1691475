"""sensible_sampling public API."""
from .config import SamplerConfig
from .data import assemble_data, load_table
from .diagnostics import ConvergenceWarning
from .draws import DrawBundle
from .inputs import ModelData
from .model import Model
from .run import Run, Results, Band
from . import models

__all__ = [
    "SamplerConfig",
    "assemble_data",
    "load_table",
    "ConvergenceWarning",
    "DrawBundle",
    "ModelData",
    "Model",
    "Run",
    "Results",
    "Band",
    "models",
]
