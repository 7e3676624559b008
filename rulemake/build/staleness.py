"""Staleness detection for build targets.

A target is up to date when its file exists and either it has no
dependencies or its mtime is strictly newer than the newest dependency.
Equal timestamps count as stale.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class StalenessReason(Enum):
    """Why a target is, or is not, rebuilt."""

    UP_TO_DATE = "up_to_date"
    NO_DEPENDENCIES = "no_dependencies"
    MISSING = "missing"
    DEPENDENCY_NEWER = "dependency_newer"


@dataclass
class StalenessResult:
    """Result of staleness check."""

    is_stale: bool
    reason: StalenessReason
    details: str | None = None

    @staticmethod
    def up_to_date(target_mtime: float, dependency_mtime: float) -> "StalenessResult":
        return StalenessResult(
            is_stale=False,
            reason=StalenessReason.UP_TO_DATE,
            details=f"Target mtime {target_mtime} > dependencies mtime {dependency_mtime}",
        )

    @staticmethod
    def no_dependencies() -> "StalenessResult":
        return StalenessResult(
            is_stale=False,
            reason=StalenessReason.NO_DEPENDENCIES,
            details="Target exists and has no dependencies",
        )

    @staticmethod
    def missing() -> "StalenessResult":
        return StalenessResult(is_stale=True, reason=StalenessReason.MISSING, details="Target does not exist")

    @staticmethod
    def dependency_newer(target_mtime: float, dependency_mtime: float) -> "StalenessResult":
        return StalenessResult(
            is_stale=True,
            reason=StalenessReason.DEPENDENCY_NEWER,
            details=f"Dependencies mtime {dependency_mtime} >= target mtime {target_mtime}",
        )


def check_staleness(
    target_mtime: float | None,
    dependency_count: int,
    dependency_mtime: float,
) -> StalenessResult:
    """Decide whether a target must be rebuilt.

    Args:
        target_mtime: Modification time of the existing target, None if absent
        dependency_count: Number of resolved dependencies
        dependency_mtime: Newest modification time among the dependencies

    Returns:
        StalenessResult with is_stale flag and reason
    """
    if target_mtime is None:
        return StalenessResult.missing()
    if dependency_count == 0:
        return StalenessResult.no_dependencies()
    if target_mtime > dependency_mtime:
        return StalenessResult.up_to_date(target_mtime, dependency_mtime)
    return StalenessResult.dependency_newer(target_mtime, dependency_mtime)
