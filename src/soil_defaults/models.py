from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

import numpy as np


ESTIMATED = "Estimated"


class SoilConfigurationError(ValueError):
    """Raised when a soil profile cannot be defaulted as configured."""


def normalize_name(name: str) -> str:
    return " ".join(name.strip().lower().split())


def as_layer_array(values) -> np.ndarray | None:
    if values is None:
        return None
    return np.array([np.nan if v is None else v for v in np.ravel(values)], dtype=float)


class VertosolType(Enum):
    BLACK = "black vertosol"
    GREY = "grey vertosol"

    @classmethod
    def from_label(cls, label: str | None) -> VertosolType | None:
        if not label:
            return None
        key = normalize_name(label)
        for member in cls:
            if member.value == key:
                return member
        return None


@dataclass
class CropParameters:
    name: str | None
    ll: np.ndarray | None = None
    kl: np.ndarray | None = None
    xf: np.ndarray | None = None
    ll_metadata: list[str | None] | None = None
    kl_metadata: list[str | None] | None = None
    xf_metadata: list[str | None] | None = None

    def __post_init__(self) -> None:
        self.ll = as_layer_array(self.ll)
        self.kl = as_layer_array(self.kl)
        self.xf = as_layer_array(self.xf)

    @property
    def key(self) -> str:
        if not self.name:
            raise SoilConfigurationError("Crop has no name.")
        return normalize_name(self.name)


@dataclass
class PhysicalProfile:
    thickness: np.ndarray
    ll15: np.ndarray | None = None
    dul: np.ndarray | None = None
    ks: np.ndarray | None = None
    crops: list[CropParameters] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.thickness = as_layer_array(self.thickness)
        self.ll15 = as_layer_array(self.ll15)
        self.dul = as_layer_array(self.dul)
        self.ks = as_layer_array(self.ks)
        crops = list(self.crops)
        self.crops = []
        for crop in crops:
            self.add_crop(crop)

    @property
    def n_layers(self) -> int:
        return len(self.thickness)

    def find_crop(self, name: str) -> CropParameters | None:
        key = normalize_name(name)
        for crop in self.crops:
            if crop.name and normalize_name(crop.name) == key:
                return crop
        return None

    def add_crop(self, crop: CropParameters) -> CropParameters:
        if crop.name and self.find_crop(crop.name) is not None:
            raise SoilConfigurationError(f"Duplicate crop name: {crop.name}")
        self.crops.append(crop)
        return crop


@dataclass
class ChemicalAnalysis:
    thickness: np.ndarray
    cl: np.ndarray | None = None
    ec: np.ndarray | None = None
    esp: np.ndarray | None = None
    ph: np.ndarray | None = None
    no3n: np.ndarray | None = None
    nh4n: np.ndarray | None = None

    def __post_init__(self) -> None:
        self.thickness = as_layer_array(self.thickness)
        for name in CHEMICAL_FIELDS:
            setattr(self, name, as_layer_array(getattr(self, name)))


@dataclass
class Sample:
    thickness: np.ndarray
    name: str | None = None
    sw: np.ndarray | None = None
    no3: np.ndarray | None = None
    nh4: np.ndarray | None = None
    cl: np.ndarray | None = None
    ec: np.ndarray | None = None
    esp: np.ndarray | None = None
    ph: np.ndarray | None = None
    oc: np.ndarray | None = None

    def __post_init__(self) -> None:
        self.thickness = as_layer_array(self.thickness)
        for name in SAMPLE_FIELDS:
            setattr(self, name, as_layer_array(getattr(self, name)))


@dataclass
class SoilProfile:
    name: str | None = None
    soil_type: str | None = None
    physical: PhysicalProfile | None = None
    chemical: ChemicalAnalysis | None = None
    samples: list[Sample] = field(default_factory=list)

    @property
    def vertosol_type(self) -> VertosolType | None:
        return VertosolType.from_label(self.soil_type)

    @property
    def initial_sample(self) -> Sample | None:
        return self.samples[0] if self.samples else None


CHEMICAL_FIELDS = ("cl", "ec", "esp", "ph", "no3n", "nh4n")
SAMPLE_FIELDS = ("sw", "no3", "nh4", "cl", "ec", "esp", "ph", "oc")
CROP_FIELDS = ("ll", "kl", "xf")
