"""
Downsampler.

Deterministic, order-preserving decimation: keep every ``step``-th point where
``step = ceil(count / max_points)`` and always keep the final point so the
series ends on its true value.  Output length is at most ``max_points + 1``.
"""

import logging
import math
from typing import List, Sequence

logger = logging.getLogger(__name__)


def downsample_indices(count: int, max_points: int) -> List[int]:
    """Indices kept when decimating ``count`` points to about ``max_points``."""
    if count <= max_points or max_points <= 0:
        return list(range(count))

    step = math.ceil(count / max_points)
    indices = list(range(0, count, step))
    if indices[-1] != count - 1:
        indices.append(count - 1)
    return indices


def downsample(rows: Sequence, max_points: int) -> list:
    """Reduce ``rows`` to at most ``max_points + 1`` entries.

    Returns the input unchanged (as a list) when it is already small enough.
    """
    indices = downsample_indices(len(rows), max_points)
    if len(indices) == len(rows):
        return list(rows)
    sampled = [rows[i] for i in indices]
    logger.info(f"[Sampler] Sampled {len(rows)} points down to {len(sampled)} points")
    return sampled


def downsample_series(labels: Sequence, datasets: Sequence[dict], max_points: int):
    """Downsample Chart.js-style ``labels`` and each dataset's per-point arrays.

    Per-point colour arrays (same length as ``labels``) are decimated with the
    data so colours stay attached to their points.

    Returns:
        Tuple of (labels, datasets) as new lists; the inputs are not modified.
    """
    indices = downsample_indices(len(labels), max_points)
    if len(indices) == len(labels):
        return list(labels), [dict(ds) for ds in datasets]

    count = len(labels)
    sampled = []
    for ds in datasets:
        new_ds = dict(ds)
        for key, value in ds.items():
            if isinstance(value, list) and len(value) == count:
                new_ds[key] = [value[i] for i in indices]
        sampled.append(new_ds)
    logger.info(f"[Sampler] Downsampled {count} labels to {len(indices)}")
    return [labels[i] for i in indices], sampled
