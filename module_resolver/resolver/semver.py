"""Semantic versioning utilities."""

import re
from typing import Optional

from module_resolver.models.resolution import VersionCheckResult

VersionTuple = tuple[int, int, int]

_LEADING_DIGITS = re.compile(r"\s*(\d+)")


def parse_version(version_str: Optional[str]) -> VersionTuple:
    """Parse a version string into a (major, minor, patch) tuple.

    Never fails: each segment contributes its leading digits, and missing
    or non-numeric segments become 0. Prefixes and PEP 440 epochs are not
    special: "v1.2.3" is (0, 2, 3) and "1!2.0" is (1, 0, 0).

    Args:
        version_str: Version string (e.g., "1.0.0", "2.1", "1.2.3-beta.1").

    Returns:
        Three-part version tuple.
    """
    if not version_str:
        return (0, 0, 0)

    release = tuple(_segment(part) for part in version_str.split(".")[:3])
    padded = (release + (0, 0, 0))[:3]
    return (padded[0], padded[1], padded[2])


def _segment(part: str) -> int:
    match = _LEADING_DIGITS.match(part)
    return int(match.group(1)) if match else 0


def compare_versions(a: VersionTuple, b: VersionTuple) -> int:
    """Compare two version tuples.

    Args:
        a: First version tuple.
        b: Second version tuple.

    Returns:
        -1 if a < b, 0 if equal, 1 if a > b.
    """
    if a < b:
        return -1
    elif a > b:
        return 1
    return 0


def compare_version_strings(v1: Optional[str], v2: Optional[str]) -> int:
    """Compare two version strings.

    Args:
        v1: First version string.
        v2: Second version string.

    Returns:
        -1 if v1 < v2, 0 if equal, 1 if v1 > v2.
    """
    return compare_versions(parse_version(v1), parse_version(v2))


def check_version_compatibility(
    installed_version: Optional[str],
    min_version: Optional[str] = None,
    max_version: Optional[str] = None,
    label: str = "Installed",
) -> VersionCheckResult:
    """Check whether a version satisfies inclusive min/max bounds.

    Args:
        installed_version: Version to check.
        min_version: Minimum compatible version.
        max_version: Maximum compatible version.
        label: How the checked version is referred to in the reason.

    Returns:
        VersionCheckResult with a reason and, on failure, a suggested fix.
    """
    if not min_version and not max_version:
        return VersionCheckResult(compatible=True, reason="No version constraints")

    installed = parse_version(installed_version)

    if min_version and compare_versions(installed, parse_version(min_version)) < 0:
        return VersionCheckResult(
            compatible=False,
            reason=f"{label} version {installed_version} is below minimum {min_version}",
            resolution=f"Update to version {min_version} or higher",
        )

    if max_version and compare_versions(installed, parse_version(max_version)) > 0:
        return VersionCheckResult(
            compatible=False,
            reason=f"{label} version {installed_version} exceeds maximum {max_version}",
            resolution=f"Downgrade to version {max_version} or lower",
        )

    return VersionCheckResult(compatible=True, reason="Version is compatible")
