from __future__ import annotations

import copy
from pathlib import Path
import sys

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from soil_defaults.core import (
    DEFAULT_OPTIONS,
    fill_in_missing_values,
    load_yaml,
    resolve_options,
)
from soil_defaults.io import profile_to_dict
from soil_defaults.models import (
    ESTIMATED,
    ChemicalAnalysis,
    CropParameters,
    PhysicalProfile,
    Sample,
    SoilConfigurationError,
    SoilProfile,
)
from soil_defaults.subsoil import constrained_kl

NAN = float("nan")
THICKNESS = [150, 150, 300, 300, 300, 300, 300]
LL15 = [0.25, 0.26, 0.27, 0.28, 0.29, 0.30, 0.31]
DUL = [0.45, 0.45, 0.44, 0.43, 0.42, 0.41, 0.40]


def _profile(soil_type: str = "Black Vertosol") -> SoilProfile:
    physical = PhysicalProfile(
        thickness=THICKNESS,
        ll15=LL15,
        dul=DUL,
        ks=[10.0, NAN, 5.0],
        crops=[
            CropParameters(name="Chickpea", ll=[0.3, NAN, 0.3]),
            CropParameters(name="Spinach"),
        ],
    )
    chemical = ChemicalAnalysis(
        thickness=THICKNESS,
        cl=[NAN, 20.0, NAN],
        ph=None,
        no3n=[NAN] * 7,
    )
    sample = Sample(
        thickness=THICKNESS,
        sw=[0.35, NAN, NAN, 0.33, NAN, NAN, NAN],
        cl=[NAN] * 7,
        esp=[2.0, 4.0, NAN, 10.0],
        ec=[0.1] * 7,
    )
    return SoilProfile(
        name="Test soil",
        soil_type=soil_type,
        physical=physical,
        chemical=chemical,
        samples=[sample],
    )


def _assert_complete(values, n: int) -> None:
    assert values is not None
    assert len(values) == n
    assert not np.isnan(values).any()


def test_fill_in_missing_values_completes_profile() -> None:
    profile = _profile()
    fill_in_missing_values(profile)

    physical = profile.physical
    assert [c.name for c in physical.crops] == [
        "Chickpea", "Spinach", "Wheat", "Sorghum", "Cotton",
    ]
    for crop in physical.crops:
        for name in ("ll", "kl", "xf"):
            _assert_complete(getattr(crop, name), 7)
            assert len(getattr(crop, f"{name}_metadata")) == 7

    for name in ("cl", "ec", "esp", "ph", "no3n", "nh4n"):
        _assert_complete(getattr(profile.chemical, name), 7)

    np.testing.assert_allclose(physical.ks, [10.0, 10.0, 5.0, 5.0, 5.0, 5.0, 5.0])


def test_crop_layer_defaults() -> None:
    profile = _profile(soil_type="Red Chromosol")
    fill_in_missing_values(profile)
    chickpea = profile.physical.find_crop("chickpea")
    np.testing.assert_allclose(chickpea.ll, [0.3, LL15[1], 0.3, *LL15[3:]])
    assert chickpea.ll_metadata == [None, ESTIMATED, None] + [ESTIMATED] * 4
    np.testing.assert_allclose(chickpea.kl, [0.06] * 7)
    np.testing.assert_allclose(chickpea.xf, [1.0] * 7)

    spinach = profile.physical.find_crop("SPINACH")
    np.testing.assert_allclose(spinach.ll, LL15)
    np.testing.assert_allclose(spinach.kl, [DEFAULT_OPTIONS.kl] * 7)
    assert spinach.kl_metadata == [ESTIMATED] * 7
    assert len(profile.physical.crops) == 2


def test_chemical_defaults() -> None:
    profile = _profile()
    fill_in_missing_values(profile)
    chemical = profile.chemical
    np.testing.assert_allclose(chemical.cl, [20.0] * 7)
    np.testing.assert_allclose(chemical.ph, [7.0] * 7)
    np.testing.assert_allclose(chemical.no3n, [0.1] * 7)
    np.testing.assert_allclose(chemical.nh4n, [0.01] * 7)
    np.testing.assert_allclose(chemical.ec, [0.0] * 7)


def test_sample_defaults() -> None:
    profile = _profile()
    fill_in_missing_values(profile)
    sample = profile.samples[0]
    assert sample.cl is None
    assert sample.oc is None
    assert sample.no3 is None
    np.testing.assert_allclose(sample.esp, [2.0, 4.0, 4.0, 10.0, 10.0, 10.0, 10.0])
    np.testing.assert_allclose(
        sample.sw, [0.35, LL15[1], LL15[2], 0.33, LL15[4], LL15[5], LL15[6]]
    )


def test_wheat_kl_constrained_by_esp() -> None:
    profile = _profile()
    fill_in_missing_values(profile)
    wheat = profile.physical.find_crop("wheat")
    expected = constrained_kl(profile.physical, profile.samples[0])
    np.testing.assert_allclose(wheat.kl, expected)
    assert wheat.kl_metadata == [ESTIMATED] * 7


def test_fill_in_missing_values_is_idempotent() -> None:
    profile = _profile()
    fill_in_missing_values(profile)
    first = copy.deepcopy(profile_to_dict(profile))
    fill_in_missing_values(profile)
    assert profile_to_dict(profile) == first


def test_crop_without_name_is_fatal() -> None:
    profile = _profile()
    profile.physical.crops.append(CropParameters(name=None))
    with pytest.raises(SoilConfigurationError):
        fill_in_missing_values(profile)


def test_duplicate_crop_name_rejected() -> None:
    physical = PhysicalProfile(thickness=THICKNESS, crops=[CropParameters(name="Wheat")])
    with pytest.raises(SoilConfigurationError):
        physical.add_crop(CropParameters(name="wheat"))


def test_absent_sub_records_are_skipped() -> None:
    sample = Sample(thickness=[100, 100], sw=[NAN, 0.2])
    profile = SoilProfile(name="samples only", soil_type="Black Vertosol", samples=[sample])
    fill_in_missing_values(profile)
    np.testing.assert_allclose(sample.sw, [0.2, 0.2])

    empty = SoilProfile(name="empty")
    fill_in_missing_values(empty)
    assert empty.physical is None
    assert empty.chemical is None


def test_resolve_options_overrides() -> None:
    options = resolve_options({"defaults": {"chemical": {"ph": 6.5}, "kl": 0.05}})
    assert options.chemical["ph"] == 6.5
    assert options.chemical["cl"] == 0.0
    assert options.kl == 0.05
    assert DEFAULT_OPTIONS.chemical["ph"] == 7.0

    profile = _profile(soil_type=None)
    fill_in_missing_values(profile, options)
    np.testing.assert_allclose(profile.chemical.ph, [6.5] * 7)
    np.testing.assert_allclose(profile.physical.find_crop("Spinach").kl, [0.05] * 7)


def test_resolve_options_rejects_unknown_keys() -> None:
    with pytest.raises(ValueError):
        resolve_options({"defaults": {"chemical": {"zinc": 1.0}}})
    with pytest.raises(ValueError):
        resolve_options({"defaults": {"lai": 1.0}})


def test_load_yaml(tmp_path: Path) -> None:
    assert load_yaml(None) == {}
    assert load_yaml(tmp_path / "missing.yaml") == {}
    cfg_path = tmp_path / "cfg.yaml"
    cfg_path.write_text("defaults:\n  xf: 0.5\n")
    assert resolve_options(load_yaml(cfg_path)).xf == 0.5


def test_crop_ll_complete_when_ll15_short() -> None:
    physical = PhysicalProfile(
        thickness=[100] * 5,
        ll15=[0.2, 0.21, 0.22],
        crops=[CropParameters(name="Wheat")],
    )
    profile = SoilProfile(name="short ll15", physical=physical)
    fill_in_missing_values(profile)
    wheat = physical.find_crop("wheat")
    np.testing.assert_allclose(wheat.ll, [0.2, 0.21, 0.22, 0.22, 0.22])
    assert wheat.ll_metadata == [ESTIMATED] * 5
    for name in ("ll", "kl", "xf"):
        _assert_complete(getattr(wheat, name), 5)


def test_crop_ll_falls_back_when_ll15_absent() -> None:
    physical = PhysicalProfile(thickness=[100, 100], crops=[CropParameters(name="Oats")])
    fill_in_missing_values(SoilProfile(name="no ll15", physical=physical))
    np.testing.assert_allclose(physical.find_crop("oats").ll, [DEFAULT_OPTIONS.ll] * 2)


def test_sample_sw_uses_ll15_mapped_onto_sample_layers() -> None:
    sample = Sample(thickness=[300, 300, 600], sw=[0.4, NAN, NAN])
    profile = _profile(soil_type=None)
    profile.samples = [sample]
    fill_in_missing_values(profile)
    # sample cumulative depths 300, 600, 1200 against physical 150, 300, 600, ..., 1800
    np.testing.assert_allclose(sample.sw, [0.4, LL15[2], LL15[4]])


def test_resolve_options_subsoil_crops() -> None:
    assert resolve_options({"defaults": {"subsoil_crops": "Wheat"}}).subsoil_crops == ("wheat",)
    assert resolve_options(
        {"defaults": {"subsoil_crops": ["Wheat", "Barley"]}}
    ).subsoil_crops == ("wheat", "barley")
    with pytest.raises(ValueError):
        resolve_options({"defaults": {"subsoil_crops": {"wheat": True}}})
