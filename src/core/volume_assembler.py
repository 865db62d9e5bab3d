"""
Volume Assembler

This module orders the slices of the selected series and packs them into a
flat 3D voxel grid. The first record supplies the canonical width, height and
physical spacing; slices whose size disagrees are dropped rather than resized,
so one corrupt file in a large folder does not block the whole study.

Inputs:
    - List of SliceRecord objects from one series

Outputs:
    - Immutable Volume (voxels concatenated in ascending order key)

Requirements:
    - numpy for concatenation
    - core.series_selector for the dominant series (load_volume)
    - utils.debug_log for dropped-slice diagnostics
"""

import math
from typing import List, Optional, Sequence
import numpy as np

from core.volume_types import SliceRecord, Volume
from core.mpr_errors import EmptyInputError, NoValidSlicesError
from core.series_selector import select_dominant_series
from utils.debug_log import debug_log


DEFAULT_SPACING = 1.0


def normalize_spacing(value: Optional[float]) -> float:
    """
    Return a usable physical spacing.

    Missing, non-numeric, non-positive or non-finite values become 1.0 so
    downstream aspect ratios never divide by zero.
    """
    if value is None:
        return DEFAULT_SPACING
    try:
        spacing = float(value)
    except (TypeError, ValueError):
        return DEFAULT_SPACING
    if not math.isfinite(spacing) or spacing <= 0:
        return DEFAULT_SPACING
    return spacing


def sort_by_order_key(records: Sequence[SliceRecord]) -> List[SliceRecord]:
    """Stable sort by order key; equal keys keep their input order."""
    return sorted(records, key=lambda record: record.order_key)


def assemble_volume(records: Sequence[SliceRecord]) -> Volume:
    """
    Build a Volume from the records of one series.

    Args:
        records: Slice records of a single series (any order)

    Returns:
        New Volume with depth equal to the number of accepted slices

    Raises:
        EmptyInputError: If records is empty
        NoValidSlicesError: If no record matches the canonical dimensions
    """
    if not records:
        raise EmptyInputError("No slice records to assemble")

    canonical = records[0]
    width = canonical.width
    height = canonical.height

    accepted: List[SliceRecord] = []
    dropped = 0
    for record in sort_by_order_key(records):
        if record.width != width or record.height != height or not record.has_consistent_size():
            dropped += 1
            debug_log(
                "volume_assembler.py:assemble_volume",
                "Dropped slice with mismatched dimensions",
                {
                    "order_key": record.order_key,
                    "size": [record.width, record.height],
                    "samples": int(record.samples.size),
                    "canonical": [width, height],
                    "source_path": record.source_path,
                },
            )
            continue
        accepted.append(record)

    if not accepted or width <= 0 or height <= 0:
        raise NoValidSlicesError(
            f"None of {len(records)} slices matched the canonical size {width}x{height}"
        )

    voxels = np.concatenate([record.samples for record in accepted])

    debug_log(
        "volume_assembler.py:assemble_volume",
        "Assembled volume",
        {"size": [width, height, len(accepted)], "dropped": dropped},
    )

    return Volume(
        width=width,
        height=height,
        depth=len(accepted),
        spacing_x=normalize_spacing(canonical.spacing_x),
        spacing_y=normalize_spacing(canonical.spacing_y),
        spacing_thickness=normalize_spacing(canonical.spacing_thickness),
        voxels=voxels,
        series_key=canonical.series_key,
        patient_name=canonical.patient_name,
        patient_id=canonical.patient_id,
    )


def load_volume(candidates: Sequence[SliceRecord]) -> Volume:
    """
    Select the dominant series from all decoded candidates and assemble it.

    Args:
        candidates: Decoded slice records, possibly from several series

    Returns:
        New Volume; the caller replaces its current volume only when this succeeds

    Raises:
        EmptyInputError: If there is nothing usable to load
        NoValidSlicesError: If the dominant series has no slice of canonical size
    """
    return assemble_volume(select_dominant_series(candidates))
