from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

import numpy as np

from .layers import remap
from .models import VertosolType, normalize_name


@dataclass(frozen=True)
class CropKLSpec:
    name: str
    kl: tuple[float, ...]


@dataclass(frozen=True)
class RegressionSpec:
    soil_type: VertosolType
    crop: str
    a: tuple[float, ...]
    b: float


# Cumulative depth (mm) at the bottom of each reference layer.
CROP_KL_DEPTHS: tuple[float, ...] = (150, 300, 600, 900, 1200, 1500, 1800)
CROP_KL_THICKNESS: tuple[float, ...] = tuple(
    float(t) for t in np.diff(CROP_KL_DEPTHS, prepend=0.0)
)

PREDICTED_THICKNESS: tuple[float, ...] = (150, 150, 300, 300, 300, 300, 300)
PREDICTED_XF: tuple[float, ...] = (1.0, 1.0, 1.0, 1.0, 1.0, 1.0, 1.0)

# Baseline wheat KL used when subsoil chemistry constrains extraction.
STANDARD_THICKNESS: tuple[float, ...] = (100, 100, 200, 200, 200, 200, 200)
STANDARD_KL: tuple[float, ...] = (0.06, 0.06, 0.04, 0.04, 0.04, 0.04, 0.02)


def _crop_kl(name: str, *kl: float) -> tuple[str, CropKLSpec]:
    return normalize_name(name), CropKLSpec(name=name, kl=tuple(kl))


DEFAULT_CROP_KL: Mapping[str, CropKLSpec] = MappingProxyType(
    dict(
        [
            _crop_kl("Wheat", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
            _crop_kl("Oats", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
            _crop_kl("Sorghum", 0.07, 0.07, 0.07, 0.05, 0.05, 0.04, 0.03),
            _crop_kl("Barley", 0.07, 0.07, 0.07, 0.05, 0.05, 0.03, 0.02),
            _crop_kl("Chickpea", 0.06, 0.06, 0.06, 0.06, 0.06, 0.06, 0.06),
            _crop_kl("Mungbean", 0.06, 0.06, 0.06, 0.04, 0.04, 0.00, 0.00),
            _crop_kl("Cotton", 0.10, 0.10, 0.10, 0.10, 0.09, 0.07, 0.05),
            _crop_kl("Canola", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
            _crop_kl("PigeonPea", 0.06, 0.06, 0.06, 0.05, 0.04, 0.02, 0.01),
            _crop_kl("Maize", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
            _crop_kl("Cowpea", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
            _crop_kl("Sunflower", 0.10, 0.10, 0.08, 0.06, 0.04, 0.02, 0.01),
            _crop_kl("Fababean", 0.08, 0.08, 0.08, 0.08, 0.06, 0.04, 0.03),
            _crop_kl("Lucerne", 0.10, 0.10, 0.10, 0.10, 0.09, 0.09, 0.09),
            _crop_kl("Lupin", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
            _crop_kl("Lentil", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
            _crop_kl("Triticale", 0.07, 0.07, 0.07, 0.04, 0.02, 0.01, 0.01),
            _crop_kl("Millet", 0.07, 0.07, 0.07, 0.05, 0.05, 0.04, 0.03),
            _crop_kl("Soybean", 0.06, 0.06, 0.06, 0.04, 0.04, 0.02, 0.01),
        ]
    )
)


def _regression(soil_type: VertosolType, crop: str, a: tuple[float, ...], b: float):
    key = (soil_type, normalize_name(crop))
    return key, RegressionSpec(soil_type=soil_type, crop=crop, a=a, b=b)


REGRESSION_COEFFICIENTS: Mapping[tuple[VertosolType, str], RegressionSpec] = MappingProxyType(
    dict(
        [
            _regression(
                VertosolType.BLACK, "Wheat",
                (0.124, 0.049, 0.024, 0.029, 0.146, 0.246, 0.406), 0.0116,
            ),
            _regression(
                VertosolType.BLACK, "Sorghum",
                (0.699, 0.802, 0.853, 0.907, 0.954, 1.003, 1.035), -0.0038,
            ),
            _regression(
                VertosolType.BLACK, "Cotton",
                (0.832, 0.868, 0.951, 0.988, 1.043, 1.095, 1.151), -0.0070,
            ),
            _regression(
                VertosolType.GREY, "Wheat",
                (0.660, 0.655, 0.701, 0.745, 0.845, 0.933, 1.084), -0.0032,
            ),
            _regression(
                VertosolType.GREY, "Sorghum",
                (0.818, 0.864, 0.882, 0.938, 1.103, 1.096, 1.172), -0.007,
            ),
            _regression(
                VertosolType.GREY, "Cotton",
                (0.853, 0.851, 0.883, 0.953, 1.022, 1.125, 1.186), -0.0082,
            ),
            _regression(
                VertosolType.GREY, "Barley",
                (0.847, 0.866, 0.835, 0.872, 0.981, 1.036, 1.152), -0.0051,
            ),
            _regression(
                VertosolType.GREY, "Chickpea",
                (0.435, 0.452, 0.481, 0.595, 0.668, 0.737, 0.875), 0.0029,
            ),
            _regression(
                VertosolType.GREY, "Fababean",
                (0.467, 0.451, 0.396, 0.336, 0.190, 0.134, 0.084), 0.02455,
            ),
            _regression(
                VertosolType.GREY, "Mungbean",
                (0.779, 0.770, 0.834, 0.990, 1.008, 1.144, 1.150), -0.0034,
            ),
        ]
    )
)

APPLICABLE_CROPS: Mapping[VertosolType, tuple[str, ...]] = MappingProxyType(
    {
        VertosolType.BLACK: ("Wheat", "Sorghum", "Cotton"),
        VertosolType.GREY: (
            "Wheat", "Sorghum", "Cotton", "Barley", "Chickpea", "Fababean", "Mungbean",
        ),
    }
)


def lookup_kl(crop_name: str) -> np.ndarray | None:
    spec = DEFAULT_CROP_KL.get(normalize_name(crop_name))
    if spec is None:
        return None
    return np.array(spec.kl, dtype=float)


def kl_for_thickness(crop_name: str, thickness) -> np.ndarray | None:
    kl = lookup_kl(crop_name)
    if kl is None:
        return None
    return remap(kl, CROP_KL_THICKNESS, thickness, kl[-1])


def applicable_crops(soil_type: VertosolType | None) -> tuple[str, ...]:
    if soil_type is None:
        return ()
    return APPLICABLE_CROPS.get(soil_type, ())


def lookup_coefficients(
    soil_type: VertosolType | None, crop_name: str
) -> RegressionSpec | None:
    if soil_type is None:
        return None
    return REGRESSION_COEFFICIENTS.get((soil_type, normalize_name(crop_name)))
