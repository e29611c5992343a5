from __future__ import annotations

import logging

import numpy as np

from .layers import fix_length, has_values, remap
from .models import ESTIMATED, CropParameters, PhysicalProfile, SoilProfile
from .tables import (
    PREDICTED_THICKNESS,
    PREDICTED_XF,
    RegressionSpec,
    applicable_crops,
    kl_for_thickness,
    lookup_coefficients,
)


LOG = logging.getLogger(__name__)

# Predicted bins forced to LL15 regardless of the regression.
SHALLOW_LL15_BINS = 3


def _on_predicted_scheme(values, physical: PhysicalProfile) -> np.ndarray:
    values = fix_length(values, physical.n_layers)
    return remap(values, physical.thickness, PREDICTED_THICKNESS, values[-1])


def predicted_ll(physical: PhysicalProfile, coefficients: RegressionSpec) -> np.ndarray:
    """Crop LL on the predicted thickness scheme from the soil's DUL and LL15.

    ``LL = DUL% * (A + B * DUL%) / 100`` bounded to ``[LL15, DUL]`` per bin,
    with the shallow bins set to LL15.
    """
    ll15 = _on_predicted_scheme(physical.ll15, physical)
    dul = _on_predicted_scheme(physical.dul, physical)

    a = np.asarray(coefficients.a, dtype=float)
    dul_percent = dul * 100.0
    ll = dul_percent * (a + coefficients.b * dul_percent) / 100.0
    ll = np.minimum(np.maximum(ll, ll15), dul)

    if ll.size >= SHALLOW_LL15_BINS:
        ll[:SHALLOW_LL15_BINS] = ll15[:SHALLOW_LL15_BINS]
    return ll


def predict_crop(profile: SoilProfile, crop_name: str) -> CropParameters | None:
    physical = profile.physical
    coefficients = lookup_coefficients(profile.vertosol_type, crop_name)
    if coefficients is None:
        LOG.debug("No LL regression for %s on %s", crop_name, profile.soil_type)
        return None

    kl = kl_for_thickness(coefficients.crop, PREDICTED_THICKNESS)
    if kl is None:
        LOG.debug("No KL curve for predicted crop %s", crop_name)
        return None

    ll = predicted_ll(physical, coefficients)
    xf = np.asarray(PREDICTED_XF, dtype=float)
    n = physical.n_layers
    return CropParameters(
        name=coefficients.crop,
        ll=remap(ll, PREDICTED_THICKNESS, physical.thickness, ll[-1]),
        kl=remap(kl, PREDICTED_THICKNESS, physical.thickness, kl[-1]),
        xf=remap(xf, PREDICTED_THICKNESS, physical.thickness, xf[-1]),
        ll_metadata=[ESTIMATED] * n,
        kl_metadata=[ESTIMATED] * n,
        xf_metadata=[ESTIMATED] * n,
    )


def add_predicted_crops(profile: SoilProfile) -> list[CropParameters]:
    """Add regression-predicted crops implied by the soil classification.

    Crops already parameterised on the profile (case-insensitive) are left
    alone. Returns the crops that were added.
    """
    soil_type = profile.vertosol_type
    crop_names = applicable_crops(soil_type)
    if not crop_names:
        LOG.debug("No predicted crops for soil type %r", profile.soil_type)
        return []

    physical = profile.physical
    if physical is None or physical.n_layers == 0:
        LOG.info("Soil %s has no physical layers; skipping predicted crops", profile.name)
        return []
    if not (has_values(physical.ll15) and has_values(physical.dul)):
        LOG.info("Soil %s lacks LL15/DUL; skipping predicted crops", profile.name)
        return []

    added: list[CropParameters] = []
    for crop_name in crop_names:
        if physical.find_crop(crop_name) is not None:
            continue
        crop = predict_crop(profile, crop_name)
        if crop is None:
            continue
        physical.add_crop(crop)
        added.append(crop)
        LOG.debug("Added predicted crop %s to %s", crop.name, profile.name)
    return added
