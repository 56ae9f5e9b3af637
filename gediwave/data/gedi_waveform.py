"""Extraction of single shot full waveforms from GEDI level 1B granules"""
from typing import Union

import numpy as np
import pandas as pd

from gediwave.data.gedi_granule import GediGranule
from gediwave.utils.logging_util import get_logger

logger = get_logger(__name__)


class ShotNotFoundError(LookupError):
    """Used when a shot number is in none of the beams of a granule"""

    def __init__(self, shot_number: int):
        self.shot_number = shot_number
        super().__init__(
            f"Shot number {shot_number} was not found within the dataset. "
            "Please try another shot number."
        )


def _elevation_axis(
    elevation_bin0: float, elevation_lastbin: float, n_samples: int
) -> np.ndarray:
    """
    Return one elevation per waveform sample, from the top of the window down.

    The receive window is split into `n_samples` intervals between bin0 and
    lastbin; each sample takes the lower edge of its interval, so the axis
    ends at elevation_lastbin.
    """
    breaks = np.linspace(elevation_bin0, elevation_lastbin, n_samples + 1)
    return breaks[1:]


def _relative_amplitude(rxwaveform: np.ndarray) -> np.ndarray:
    """Rescale amplitudes to 0-100. A flat waveform maps to all zeros."""
    rxwaveform = rxwaveform.astype(np.float64)
    if len(rxwaveform) == 0:
        return rxwaveform
    low, high = rxwaveform.min(), rxwaveform.max()
    if high == low:
        return np.zeros_like(rxwaveform)
    return (rxwaveform - low) / (high - low) * 100


def get_level1b_waveform(
    granule: GediGranule,
    shot_number: Union[int, str],
    normalize: bool = False,
) -> pd.DataFrame:
    """
    Extract the full received waveform of a single shot.

    Args:
        granule (GediGranule): An open level 1B granule.
        shot_number (Union[int, str]): The shot to extract. Numeric strings are
            accepted, shot numbers exceed the float64 precision so should not be
            passed as floats.
        normalize (bool, optional): Also return the amplitude rescaled to a 0-100
            range as `rxwaveform_relative`. Defaults to False.

    Raises:
        ShotNotFoundError: If no beam of the granule contains the shot. Shot
            numbers outside the unsigned 64 bit range are never found.
        ValueError: If the stored waveform samples of the shot are truncated.

    Returns:
        pd.DataFrame: One row per waveform sample with the raw amplitude
            (`rxwaveform`) and its elevation in meters (`elevation`), ordered
            from the top of the receive window down.
    """
    requested = int(shot_number)
    if not 0 <= requested <= np.iinfo(np.uint64).max:
        raise ShotNotFoundError(requested)
    target = np.uint64(requested)

    for beam in granule.iter_beams():
        index = beam.shot_index(target)
        if index is not None:
            break
    else:
        raise ShotNotFoundError(requested)

    logger.debug("Shot %s found in beam %s at row %s", target, beam.name, index)

    rxwaveform = beam.rx_waveform(index)
    elevation = _elevation_axis(
        float(beam["geolocation/elevation_bin0"][index]),
        float(beam["geolocation/elevation_lastbin"][index]),
        len(rxwaveform),
    )

    waveform = pd.DataFrame({"rxwaveform": rxwaveform, "elevation": elevation})
    if normalize:
        waveform["rxwaveform_relative"] = _relative_amplitude(rxwaveform)
    return waveform
