from typing import Optional
import numpy as np

def get_valid_mask(
    arr: np.ndarray,
    nodata: Optional[float | int] = None,
) -> np.ndarray:
    """
    Return boolean mask of valid pixels in `arr` (i.e., finite pixels not equal to `nodata`).
    If `nodata` is None, all finite pixels are considered valid.
    """
    valid = np.isfinite(arr)
    if nodata is not None and not np.isnan(nodata):
        return valid & (arr != nodata)
    return valid
