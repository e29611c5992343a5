from __future__ import annotations

from dataclasses import dataclass, field, replace
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

import numpy as np
import yaml

from .layers import fill_missing, fix_length, has_values, remap
from .models import (
    CHEMICAL_FIELDS,
    ESTIMATED,
    SAMPLE_FIELDS,
    ChemicalAnalysis,
    CropParameters,
    PhysicalProfile,
    Sample,
    SoilConfigurationError,
    SoilProfile,
    normalize_name,
)
from .predicted import add_predicted_crops
from .subsoil import adjust_kl_for_subsoil
from .tables import kl_for_thickness


LOG = logging.getLogger(__name__)


CHEMICAL_DEFAULTS: Mapping[str, float] = MappingProxyType(
    {"cl": 0.0, "ec": 0.0, "esp": 0.0, "ph": 7.0, "no3n": 0.1, "nh4n": 0.01}
)
SAMPLE_DEFAULTS: Mapping[str, float] = MappingProxyType(
    {"no3": 0.1, "nh4": 0.01, "cl": 0.0, "ec": 0.0, "esp": 0.0, "ph": 7.0, "oc": 0.0}
)


@dataclass(frozen=True)
class DefaultingOptions:
    chemical: Mapping[str, float] = field(default_factory=lambda: CHEMICAL_DEFAULTS)
    sample: Mapping[str, float] = field(default_factory=lambda: SAMPLE_DEFAULTS)
    ll: float = 0.0
    kl: float = 0.06
    xf: float = 1.0
    ks: float = 0.0
    subsoil_crops: tuple[str, ...] = ("wheat",)


DEFAULT_OPTIONS = DefaultingOptions()


def load_yaml(path: str | Path | None) -> dict:
    if not path:
        return {}
    p = Path(path)
    if not p.exists():
        return {}
    with open(p, "r") as f:
        return yaml.safe_load(f) or {}


def _overlay(base: Mapping[str, float], overrides: dict, section: str) -> Mapping[str, float]:
    unknown = [k for k in overrides if k not in base]
    if unknown:
        raise ValueError(
            f"Unknown {section} defaults: {unknown}. Valid keys: {list(base.keys())}"
        )
    merged = dict(base)
    merged.update({k: float(v) for k, v in overrides.items()})
    return MappingProxyType(merged)


def resolve_options(cfg: dict) -> DefaultingOptions:
    cfg_defaults = dict(cfg.get("defaults", {}) or {})
    options = DEFAULT_OPTIONS

    valid = {"chemical", "sample", "ll", "kl", "xf", "ks", "subsoil_crops"}
    unknown = [k for k in cfg_defaults if k not in valid]
    if unknown:
        raise ValueError(f"Unknown defaults keys: {unknown}. Valid keys: {sorted(valid)}")

    if "chemical" in cfg_defaults:
        options = replace(
            options, chemical=_overlay(options.chemical, cfg_defaults["chemical"], "chemical")
        )
    if "sample" in cfg_defaults:
        options = replace(
            options, sample=_overlay(options.sample, cfg_defaults["sample"], "sample")
        )
    for key in ("ll", "kl", "xf", "ks"):
        if key in cfg_defaults:
            options = replace(options, **{key: float(cfg_defaults[key])})
    if "subsoil_crops" in cfg_defaults:
        crops = cfg_defaults["subsoil_crops"] or []
        if isinstance(crops, str):
            crops = [crops]
        if not isinstance(crops, list):
            raise ValueError(f"subsoil_crops must be a list of crop names, got: {crops!r}")
        options = replace(options, subsoil_crops=tuple(normalize_name(c) for c in crops))
    return options


def _check_crop_names(physical: PhysicalProfile) -> None:
    for i, crop in enumerate(physical.crops):
        if not crop.name or not crop.name.strip():
            raise SoilConfigurationError(f"Crop {i} on the physical profile has no name.")


def _fix_metadata(metadata: list[str | None] | None, length: int) -> list[str | None]:
    out = list(metadata or [])[:length]
    out.extend([None] * (length - len(out)))
    return out


def _default_layers(
    values, metadata, length: int, fallback: np.ndarray
) -> tuple[np.ndarray, list[str | None]]:
    out = fix_length(values, length)
    meta = _fix_metadata(metadata, length)
    missing = np.isnan(out)
    out[missing] = fallback[missing]
    for i in np.flatnonzero(missing):
        meta[i] = ESTIMATED
    return out, meta


def fill_crop(crop: CropParameters, physical: PhysicalProfile, options: DefaultingOptions) -> None:
    n = physical.n_layers
    if crop.kl is None:
        kl = kl_for_thickness(crop.key, physical.thickness)
        if kl is None:
            LOG.debug("No KL table entry for crop %s", crop.name)
        else:
            crop.kl = kl
            crop.kl_metadata = [ESTIMATED] * n

    crop.ll, crop.ll_metadata = _default_layers(
        crop.ll, crop.ll_metadata, n, fill_missing(physical.ll15, n, options.ll)
    )
    crop.kl, crop.kl_metadata = _default_layers(
        crop.kl, crop.kl_metadata, n, np.full(n, options.kl)
    )
    crop.xf, crop.xf_metadata = _default_layers(
        crop.xf, crop.xf_metadata, n, np.full(n, options.xf)
    )


def fill_chemical(chemical: ChemicalAnalysis, options: DefaultingOptions) -> None:
    n = len(chemical.thickness)
    for name in CHEMICAL_FIELDS:
        setattr(chemical, name, fill_missing(getattr(chemical, name), n, options.chemical[name]))


def fill_sample(
    sample: Sample, physical: PhysicalProfile | None, options: DefaultingOptions
) -> None:
    n = len(sample.thickness)
    for name in SAMPLE_FIELDS:
        values = getattr(sample, name)
        if not has_values(values):
            setattr(sample, name, None)
        elif name != "sw":
            setattr(sample, name, fill_missing(values, n, options.sample[name]))

    if sample.sw is None:
        return
    sw = fix_length(sample.sw, n)
    missing = np.isnan(sw)
    if missing.any() and physical is not None and has_values(physical.ll15):
        ll15 = fix_length(physical.ll15, physical.n_layers)
        mapped = remap(ll15, physical.thickness, sample.thickness, ll15[-1])
        sw[missing] = mapped[missing]
    sample.sw = fill_missing(sw, n, 0.0)


def fill_in_missing_values(
    profile: SoilProfile, options: DefaultingOptions = DEFAULT_OPTIONS
) -> None:
    """Fill in missing values on ``profile`` in place.

    Safe to call repeatedly; a second pass leaves the profile unchanged.
    Raises SoilConfigurationError when a crop record has no name.
    """
    physical = profile.physical
    if physical is not None:
        _check_crop_names(physical)
        add_predicted_crops(profile)
    else:
        LOG.info("Soil %s has no physical profile", profile.name)

    if profile.chemical is not None:
        fill_chemical(profile.chemical, options)

    if physical is not None:
        subsoil_crops = {normalize_name(c) for c in options.subsoil_crops}
        for crop in physical.crops:
            fill_crop(crop, physical, options)
            if crop.key in subsoil_crops:
                adjust_kl_for_subsoil(crop, physical, profile.initial_sample)

    for sample in profile.samples:
        fill_sample(sample, physical, options)

    if physical is not None and physical.ks is not None and len(physical.ks) > 0:
        physical.ks = fill_missing(physical.ks, physical.n_layers, options.ks)
