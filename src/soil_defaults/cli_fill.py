from __future__ import annotations

import argparse
import json
import logging
import sys

from soil_defaults.core import fill_in_missing_values, load_yaml, resolve_options
from soil_defaults.io import load_profile, profile_to_dict, write_profile


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description=(
            "Fill in missing soil parameters (crop LL/KL/XF, chemistry, samples) "
            "and write the completed profile as JSON."
        )
    )
    parser.add_argument("--input", required=True, help="Soil profile (YAML or JSON).")
    parser.add_argument(
        "--output",
        default=None,
        help="Output JSON path. Default: write to stdout.",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Optional YAML config with a 'defaults' section overriding fallback values.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        help="Logging level (DEBUG, INFO, WARNING).",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> None:
    args = _parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level.upper(), logging.WARNING))

    options = resolve_options(load_yaml(args.config))
    profile = load_profile(args.input)
    fill_in_missing_values(profile, options)

    if args.output is None:
        json.dump(profile_to_dict(profile), sys.stdout, indent=2, sort_keys=True)
        sys.stdout.write("\n")
        return

    out_path = write_profile(args.output, profile)
    n_crops = len(profile.physical.crops) if profile.physical is not None else 0
    print(f"Saved filled profile: {out_path}")
    print(f"Crops: {n_crops}, samples: {len(profile.samples)}")


if __name__ == "__main__":
    main()
