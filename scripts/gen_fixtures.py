#!/usr/bin/env python3
"""Generate synthetic XYZ tile fixtures for testing.

Fixtures are minimal synthetic tiles - not real terrain data. The output
directory mirrors an extracted 25 m dataset release, so tests can point a
provider's cache_dir straight at it.

Usage:
    python scripts/gen_fixtures.py

Output:
    tests/fixtures/dgm25_hh_2000/s32_*/dgm25_32_*_5930_1_hh.xyz

Dependencies:
    This script imports from shared/fixtures_expected.py (not tests/) to avoid
    circular dependencies between scripts and tests packages.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np

from shared.fixtures_expected import EXPECTED_FIXTURE_COUNT, EXPECTED_FIXTURES

# Output directory
FIXTURES_DIR = Path(__file__).parent.parent / "tests" / "fixtures"
RELEASE = "dgm25_hh_2000"
RESOLUTION = 25

# =============================================================================
# Planar tile configuration
# =============================================================================
# z = PLANE_Z0 + PLANE_DZ_DE * (e - E0) + PLANE_DZ_DN * (n - N0)
# Bilinear interpolation reproduces a plane exactly, so provider tests can
# compare against the formula at any interior point.
PLANE_E0, PLANE_N0 = 551000, 5930000
PLANE_Z0 = 5.0
PLANE_DZ_DE = 0.01
PLANE_DZ_DN = 0.02


def tile_path(easting_prefix: str, northing_prefix: str = "5930") -> Path:
    name = f"dgm{RESOLUTION}_32_{easting_prefix}_{northing_prefix}_1_hh.xyz"
    return FIXTURES_DIR / RELEASE / f"s32_{easting_prefix}" / name


def write_rows(path: Path, rows: list[tuple[float, ...]]) -> None:
    """Write rows as space separated values with two decimals."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = [" ".join(f"{v:.2f}" for v in row) for row in rows]
    path.write_text("".join(f"{line}\n" for line in lines))
    print(f"  wrote {path.relative_to(FIXTURES_DIR)} ({len(rows)} rows)")


def gen_planar_tile() -> None:
    """Tile 551_5930: 40x40 samples on a tilted plane."""
    eastings = np.arange(PLANE_E0, PLANE_E0 + 1000, RESOLUTION)
    northings = np.arange(PLANE_N0, PLANE_N0 + 1000, RESOLUTION)
    rows = []
    for e in eastings:
        for n in northings:
            z = PLANE_Z0 + PLANE_DZ_DE * (e - PLANE_E0) + PLANE_DZ_DN * (n - PLANE_N0)
            rows.append((float(e), float(n), float(z)))
    write_rows(tile_path("551"), rows)


def gen_corner_tile() -> None:
    """Tile 552_5930: one cell with corners 10/20/30/40 and a duplicated row."""
    write_rows(
        tile_path("552"),
        [
            (552000.0, 5930000.0, 10.0),
            (552025.0, 5930000.0, 20.0),
            (552000.0, 5930025.0, 30.0),
            (552025.0, 5930025.0, 40.0),
            (552050.0, 5930000.0, 50.0),
            (552050.0, 5930000.0, 55.0),  # last value wins
        ],
    )


def gen_malformed_tile() -> None:
    """Tile 553_5930: second row lacks the elevation column."""
    path = tile_path("553")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("553000.00 5930000.00 10.00\n553025.00 5930000.00\n")
    print(f"  wrote {path.relative_to(FIXTURES_DIR)} (malformed)")


def gen_empty_tile() -> None:
    """Tile 554_5930: zero-byte file."""
    path = tile_path("554")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(b"")
    print(f"  wrote {path.relative_to(FIXTURES_DIR)} (empty)")


def verify() -> None:
    missing = [f for f in EXPECTED_FIXTURES if not (FIXTURES_DIR / f).exists()]
    if missing:
        raise SystemExit(f"Missing fixtures: {missing}")
    print(f"All {EXPECTED_FIXTURE_COUNT} fixtures present.")


def main() -> None:
    print(f"Output directory: {FIXTURES_DIR}")
    gen_planar_tile()
    gen_corner_tile()
    gen_malformed_tile()
    gen_empty_tile()
    verify()


if __name__ == "__main__":
    main()
