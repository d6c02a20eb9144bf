"""Single source of truth for expected XYZ test fixtures.

This module defines the list of expected fixture files used by both:
- scripts/gen_fixtures.py (generation verification)
- tests/gis/test_fixtures_sanity.py (existence verification)

Location: shared/ (not tests/) to avoid scripts->tests dependency.

Paths are relative to tests/fixtures/, which is laid out like an extracted
dataset (usable directly as a provider cache_dir).
"""

from __future__ import annotations

# Sorted alphabetically for deterministic comparison.
EXPECTED_FIXTURES: list[str] = sorted(
    [
        "dgm25_hh_2000/s32_551/dgm25_32_551_5930_1_hh.xyz",  # Planar 40x40 grid
        "dgm25_hh_2000/s32_552/dgm25_32_552_5930_1_hh.xyz",  # Known corners + duplicate
        "dgm25_hh_2000/s32_553/dgm25_32_553_5930_1_hh.xyz",  # Malformed row
        "dgm25_hh_2000/s32_554/dgm25_32_554_5930_1_hh.xyz",  # Empty file
    ]
)

# Count derived from list for verification
EXPECTED_FIXTURE_COUNT: int = len(EXPECTED_FIXTURES)
