from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from .layers import fill_missing, has_values, remap
from .models import ESTIMATED, CropParameters, PhysicalProfile, Sample
from .tables import STANDARD_KL, STANDARD_THICKNESS


LOG = logging.getLogger(__name__)


@dataclass(frozen=True)
class SubsoilConstraint:
    """Attenuation ``min(1, scale * exp(-rate * x))`` for one sample reading.

    Hochman et al. (2007), Simulating the effects of saline and sodic subsoils
    on wheat crops growing on Vertosols. Aust. J. Agric. Res. 58, 802-810.
    """

    field_name: str
    scale: float
    rate: float

    def factor(self, values: np.ndarray) -> np.ndarray:
        return np.minimum(1.0, self.scale * np.exp(-self.rate * values))


# Checked in order; the first reading with any real value is used on its own.
SUBSOIL_CONSTRAINTS: tuple[SubsoilConstraint, ...] = (
    SubsoilConstraint(field_name="cl", scale=4.0, rate=0.005),
    SubsoilConstraint(field_name="esp", scale=10.0, rate=0.15),
    SubsoilConstraint(field_name="ec", scale=3.0, rate=1.3),
)


def select_constraint(sample: Sample | None) -> tuple[SubsoilConstraint, np.ndarray] | None:
    if sample is None:
        return None
    for constraint in SUBSOIL_CONSTRAINTS:
        values = getattr(sample, constraint.field_name)
        if has_values(values):
            return constraint, values
    return None


def constrained_kl(physical: PhysicalProfile, sample: Sample | None) -> np.ndarray | None:
    selected = select_constraint(sample)
    if selected is None:
        return None
    constraint, values = selected

    n_sample = len(sample.thickness)
    if n_sample == 0:
        return None
    readings = fill_missing(values, n_sample, 0.0)
    readings = remap(readings, sample.thickness, physical.thickness, readings[-1])

    baseline = remap(STANDARD_KL, STANDARD_THICKNESS, physical.thickness, STANDARD_KL[-1])
    LOG.debug("Constraining KL with sample %s", constraint.field_name.upper())
    return baseline * constraint.factor(readings)


def adjust_kl_for_subsoil(
    crop: CropParameters, physical: PhysicalProfile, sample: Sample | None
) -> bool:
    """Replace the crop KL with the subsoil-constrained baseline.

    Returns False (KL untouched) when the sample has no CL, ESP or EC values.
    """
    kl = constrained_kl(physical, sample)
    if kl is None:
        return False
    crop.kl = kl
    crop.kl_metadata = [ESTIMATED] * physical.n_layers
    return True
