"""
Series Selector

This module groups decoded slice records by series key and picks the dominant
series. DICOM folders commonly contain several series (localizers, different
sequences); the series with the most slices is taken as the volume to show.

Inputs:
    - List of SliceRecord objects (any order, any series)

Outputs:
    - Records grouped by series key
    - Records of the dominant series, in input order

Requirements:
    - core.volume_types for SliceRecord
    - core.mpr_errors for EmptyInputError
"""

from typing import Dict, Iterable, List, Optional
from core.volume_types import SliceRecord
from core.mpr_errors import EmptyInputError


def _usable_series_key(record: SliceRecord) -> Optional[str]:
    """Return the record's series key, or None if it is missing or blank."""
    key = record.series_key
    if key is None:
        return None
    key = str(key).strip()
    return key or None


def group_by_series(candidates: Iterable[SliceRecord]) -> Dict[str, List[SliceRecord]]:
    """
    Group records by series key.

    Records without a usable series key are skipped. Keys appear in the
    order they were first encountered.

    Args:
        candidates: Decoded slice records

    Returns:
        Dictionary mapping series key to the list of its records (input order kept)
    """
    groups: Dict[str, List[SliceRecord]] = {}
    for record in candidates:
        key = _usable_series_key(record)
        if key is None:
            continue
        groups.setdefault(key, []).append(record)
    return groups


def select_dominant_series(candidates: Iterable[SliceRecord]) -> List[SliceRecord]:
    """
    Pick the series with the largest number of records.

    On a tie the series key encountered first wins, so the result is
    deterministic for a given input order.

    Args:
        candidates: Decoded slice records

    Returns:
        Records belonging to the dominant series, in input order

    Raises:
        EmptyInputError: If there are no candidates or none has a usable series key
    """
    groups = group_by_series(candidates)
    if not groups:
        raise EmptyInputError("No slice candidates with a usable series key")

    best_key = None
    best_count = 0
    for key, records in groups.items():
        # Strictly greater keeps the earliest key on ties
        if len(records) > best_count:
            best_key = key
            best_count = len(records)

    return groups[best_key]
