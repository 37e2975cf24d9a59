"""Segment statistics contract.

Enforces the structural guarantees of computed segment statistics. The
scientific values are the calculator's responsibility.
"""

import math

from pupilpp.contracts.base import require


def assert_segment_stats(segments, role_names) -> None:
    """Enforce segment statistics contract.

    Parameters
    ----------
    segments : sequence of Segment
        Output of SegmentStatsCalculator.compute().
    role_names : tuple of str
        Eye-role names every segment must report.

    Raises
    ------
    ContractViolation
    """
    for seg in segments:
        require(
            seg.start <= seg.end,
            f"Segment contract violated: '{seg.name}' has start {seg.start} > end {seg.end}"
        )
        for view, stats in (("smooth", seg.smooth_stats), ("valid", seg.valid_stats)):
            require(
                set(stats) == set(role_names),
                f"Segment contract violated: '{seg.name}' {view} stats cover "
                f"{sorted(stats)}, expected {sorted(role_names)}"
            )
            for role, record in stats.items():
                require(
                    record.sample_count >= 0,
                    f"Segment contract violated: '{seg.name}' {role} {view} has negative count"
                )
                pct = record.missing_or_valid_percent
                require(
                    math.isnan(pct) or 0.0 <= pct <= 100.0,
                    f"Segment contract violated: '{seg.name}' {role} {view} percentage {pct} "
                    "outside [0, 100]"
                )
                if not math.isnan(record.mean_diameter):
                    require(
                        record.min_diameter <= record.mean_diameter <= record.max_diameter,
                        f"Segment contract violated: '{seg.name}' {role} {view} mean "
                        "outside [min, max]"
                    )
