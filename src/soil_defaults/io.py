from __future__ import annotations

import json
import math
from pathlib import Path

import numpy as np
import yaml

from .models import (
    CHEMICAL_FIELDS,
    CROP_FIELDS,
    SAMPLE_FIELDS,
    ChemicalAnalysis,
    CropParameters,
    PhysicalProfile,
    Sample,
    SoilProfile,
)


def _lower_keys(data: dict | None) -> dict:
    return {str(k).lower(): v for k, v in (data or {}).items()}


def _array_to_list(values) -> list[float | None] | None:
    if values is None:
        return None
    return [None if math.isnan(v) else float(v) for v in np.asarray(values, dtype=float)]


def _crop_from_dict(data: dict) -> CropParameters:
    data = _lower_keys(data)
    kwargs = {name: data.get(name) for name in CROP_FIELDS}
    for name in CROP_FIELDS:
        meta = data.get(f"{name}_metadata")
        kwargs[f"{name}_metadata"] = list(meta) if meta is not None else None
    return CropParameters(name=data.get("name"), **kwargs)


def profile_from_dict(data: dict) -> SoilProfile:
    data = _lower_keys(data)

    physical = None
    if data.get("physical") is not None:
        raw = _lower_keys(data["physical"])
        physical = PhysicalProfile(
            thickness=raw.get("thickness") or [],
            ll15=raw.get("ll15"),
            dul=raw.get("dul"),
            ks=raw.get("ks"),
            crops=[_crop_from_dict(c) for c in raw.get("crops") or []],
        )

    chemical = None
    if data.get("chemical") is not None:
        raw = _lower_keys(data["chemical"])
        thickness = raw.get("thickness")
        if thickness is None and physical is not None:
            thickness = physical.thickness
        chemical = ChemicalAnalysis(
            thickness=thickness if thickness is not None else [],
            **{name: raw.get(name) for name in CHEMICAL_FIELDS},
        )

    samples = []
    for raw in data.get("samples") or []:
        raw = _lower_keys(raw)
        samples.append(
            Sample(
                thickness=raw.get("thickness") or [],
                name=raw.get("name"),
                **{name: raw.get(name) for name in SAMPLE_FIELDS},
            )
        )

    return SoilProfile(
        name=data.get("name"),
        soil_type=data.get("soil_type") or data.get("soiltype"),
        physical=physical,
        chemical=chemical,
        samples=samples,
    )


def profile_to_dict(profile: SoilProfile) -> dict:
    out: dict = {"name": profile.name, "soil_type": profile.soil_type}

    physical = profile.physical
    if physical is not None:
        crops = []
        for crop in physical.crops:
            entry: dict = {"name": crop.name}
            for name in CROP_FIELDS:
                entry[name] = _array_to_list(getattr(crop, name))
                entry[f"{name}_metadata"] = getattr(crop, f"{name}_metadata")
            crops.append(entry)
        out["physical"] = {
            "thickness": _array_to_list(physical.thickness),
            "ll15": _array_to_list(physical.ll15),
            "dul": _array_to_list(physical.dul),
            "ks": _array_to_list(physical.ks),
            "crops": crops,
        }

    if profile.chemical is not None:
        out["chemical"] = {"thickness": _array_to_list(profile.chemical.thickness)}
        for name in CHEMICAL_FIELDS:
            out["chemical"][name] = _array_to_list(getattr(profile.chemical, name))

    out["samples"] = []
    for sample in profile.samples:
        entry = {"name": sample.name, "thickness": _array_to_list(sample.thickness)}
        for name in SAMPLE_FIELDS:
            entry[name] = _array_to_list(getattr(sample, name))
        out["samples"].append(entry)
    return out


def load_profile(path: str | Path) -> SoilProfile:
    p = Path(path)
    if not p.exists():
        raise FileNotFoundError(f"Soil profile not found: {p}")
    with open(p, "r") as f:
        if p.suffix.lower() == ".json":
            data = json.load(f)
        else:
            data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Soil profile must be a mapping: {p}")
    return profile_from_dict(data)


def write_profile(path: str | Path, profile: SoilProfile) -> Path:
    out = Path(path)
    out.parent.mkdir(parents=True, exist_ok=True)
    with open(out, "w") as f:
        json.dump(profile_to_dict(profile), f, indent=2, sort_keys=True)
    return out
