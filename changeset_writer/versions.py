"""Version parsing and bumping utilities.

Handles conversion between version strings and semver objects, with
special handling for incomplete version strings (e.g., "1.0" → "1.0.0").
"""

from __future__ import annotations

import semver

from .models import BumpType


def parse_version(version_str: str) -> semver.Version:
    """Parse a version string into a semver.Version object.

    Handles incomplete versions by padding with zeros:
    - "1" → "1.0.0"
    - "1.2" → "1.2.0"
    - "1.2.3" → "1.2.3"

    Full versions are parsed as-is, so prerelease and build metadata
    ("1.2.3-beta.1") are kept.
    """
    if semver.Version.is_valid(version_str):
        return semver.Version.parse(version_str)
    parts = version_str.split(".")
    # Pad with zeros to ensure we have at least 3 parts
    while len(parts) < 3:
        parts.append("0")
    return semver.Version.parse(".".join(parts[:3]))


def bump_version(version_str: str, bump: BumpType) -> str:
    """Apply a bump kind and return the next version as a string.

    Examples:
        ("1.2.3", PATCH) → "1.2.4"
        ("1.2.3", MINOR) → "1.3.0"
        ("1.2", MAJOR) → "2.0.0"
    """
    version = parse_version(version_str)
    if bump is BumpType.MAJOR:
        return str(version.bump_major())
    if bump is BumpType.MINOR:
        return str(version.bump_minor())
    return str(version.bump_patch())
