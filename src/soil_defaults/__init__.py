from .core import (
    DEFAULT_OPTIONS,
    DefaultingOptions,
    fill_in_missing_values,
    load_yaml,
    resolve_options,
)
from .layers import fill_missing, fix_length, has_values, remap
from .models import (
    ESTIMATED,
    ChemicalAnalysis,
    CropParameters,
    PhysicalProfile,
    Sample,
    SoilConfigurationError,
    SoilProfile,
    VertosolType,
)
from .predicted import add_predicted_crops, predict_crop, predicted_ll
from .subsoil import adjust_kl_for_subsoil, constrained_kl, select_constraint
from .tables import kl_for_thickness, lookup_coefficients, lookup_kl

__all__ = [
    "DEFAULT_OPTIONS",
    "ESTIMATED",
    "ChemicalAnalysis",
    "CropParameters",
    "DefaultingOptions",
    "PhysicalProfile",
    "Sample",
    "SoilConfigurationError",
    "SoilProfile",
    "VertosolType",
    "add_predicted_crops",
    "adjust_kl_for_subsoil",
    "constrained_kl",
    "fill_in_missing_values",
    "fill_missing",
    "fix_length",
    "has_values",
    "kl_for_thickness",
    "load_yaml",
    "lookup_coefficients",
    "lookup_kl",
    "predict_crop",
    "predicted_ll",
    "remap",
    "resolve_options",
    "select_constraint",
]
