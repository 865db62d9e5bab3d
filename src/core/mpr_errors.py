"""
MPR Engine Errors

Error kinds reported by the volume loading and plane extraction functions.
None of these are transient; callers show a "no data" state or clamp their
navigation ranges instead of retrying.

Requirements:
    - Standard library only
"""


class MPRError(Exception):
    """Base class for all engine errors."""
    pass


class EmptyInputError(MPRError):
    """No candidates at all, or none carrying a usable series key."""
    pass


class NoValidSlicesError(MPRError):
    """Candidates existed but none matched the canonical slice dimensions."""
    pass


class IndexOutOfRangeError(MPRError, IndexError):
    """Navigation index outside the valid extent for the requested axis."""

    def __init__(self, axis: str, index: int, extent: int):
        super().__init__(f"{axis} index {index} out of range [0, {extent})")
        self.axis = axis
        self.index = index
        self.extent = extent


class CorruptVolumeError(MPRError):
    """Voxel storage does not hold width*height*depth samples."""
    pass
