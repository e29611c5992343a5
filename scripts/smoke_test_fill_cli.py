from __future__ import annotations

import json
import math
import os
from pathlib import Path
import subprocess
import sys
import tempfile


def main() -> None:
    root = Path(__file__).resolve().parents[1]
    profile_path = root / "examples" / "black_vertosol.yaml"
    config_path = root / "config" / "base.yaml"
    if not profile_path.exists():
        raise FileNotFoundError(f"Missing example profile: {profile_path}")

    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(
        p for p in [str(root / "src"), env.get("PYTHONPATH", "")] if p
    )

    with tempfile.TemporaryDirectory(prefix="soil_fill_smoke_") as tmpdir:
        out_path = Path(tmpdir) / "filled.json"
        cmd = [
            sys.executable,
            "-m",
            "soil_defaults.cli_fill",
            "--input",
            str(profile_path),
            "--config",
            str(config_path),
            "--output",
            str(out_path),
        ]
        subprocess.run(cmd, check=True, cwd=root, env=env)

        with open(out_path, "r") as f:
            data = json.load(f)

        n_layers = len(data["physical"]["thickness"])
        crops = data["physical"]["crops"]
        if len(crops) != 4:
            raise RuntimeError(f"Unexpected crop count {len(crops)} != 4")

        for crop in crops:
            for key in ("ll", "kl", "xf"):
                values = crop[key]
                if len(values) != n_layers:
                    raise RuntimeError(f"{crop['name']} {key} has {len(values)} layers")
                if any(v is None or math.isnan(v) for v in values):
                    raise RuntimeError(f"{crop['name']} {key} still has missing values")

        for key, values in data["chemical"].items():
            if key != "thickness" and None in values:
                raise RuntimeError(f"Chemical {key} still has missing values")

        print("Smoke test passed:")
        print(f"- Crops: {[c['name'] for c in crops]}")
        print(f"- Layers: {n_layers}")


if __name__ == "__main__":
    main()
