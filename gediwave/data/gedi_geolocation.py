"""Extraction of per-shot geolocation tables from GEDI granules"""
from typing import Iterable, Optional, Sequence

import numpy as np
import pandas as pd
from tqdm.autonotebook import tqdm

from gediwave.constants import (
    LEVEL1B_DEFAULT_SELECT,
    LEVEL1B_GEO_FIELDS,
    LEVEL2A_DEFAULT_SELECT,
    LEVEL2A_GEO_FIELDS,
    SHOT_NUMBER,
)
from gediwave.data.gedi_granule import GediBeam, GediGranule
from gediwave.utils.logging_util import get_logger

logger = get_logger(__name__)


def _requested_columns(
    geo_fields: Sequence[str], select: Optional[Iterable[str]]
) -> list[str]:
    """shot_number first, then the remaining fields in request order."""
    if select is None:
        select = ()
    elif isinstance(select, str):
        select = [select]
    fields = list(dict.fromkeys([*geo_fields, *select]))
    return [SHOT_NUMBER] + [field for field in fields if field != SHOT_NUMBER]


def _read_beam_fields(beam: GediBeam, columns: list[str]) -> dict:
    """
    Read the requested per-shot fields of one beam.

    Fields the beam does not carry are returned as None, the caller decides
    how to fill them.

    Raises:
        KeyError: If the beam has no shot_number dataset.
        ValueError: If a matched dataset does not hold one value per shot.
    """
    paths = beam.find_datasets(columns)
    if SHOT_NUMBER not in paths:
        raise KeyError(f"Beam {beam.name} has no {SHOT_NUMBER} dataset.")

    n_shots = beam[paths[SHOT_NUMBER]].shape[0]
    data = {}
    for field in columns:
        path = paths.get(field)
        if path is None:
            data[field] = None
            continue
        values = beam[path][:]
        if values.ndim != 1 or values.shape[0] != n_shots:
            raise ValueError(
                f"Dataset {beam.name}/{path} with shape {values.shape} is not a "
                f"per-shot field (beam has {n_shots} shots)."
            )
        data[field] = values
    return data


def _extract_geo_table(
    granule: GediGranule,
    geo_fields: Sequence[str],
    select: Optional[Iterable[str]],
    progress: bool = False,
) -> pd.DataFrame:
    columns = _requested_columns(geo_fields, select)
    accumulated: dict[str, list[np.ndarray]] = {field: [] for field in columns}
    found = {SHOT_NUMBER}

    for beam in tqdm(
        granule.list_beams(), disable=not progress, leave=False
    ):
        beam_data = _read_beam_fields(beam, columns)
        n_shots = len(beam_data[SHOT_NUMBER])
        logger.debug("Read %s shots from beam %s", n_shots, beam.name)
        for field, values in beam_data.items():
            if values is None:
                # keep rows aligned when a field is missing in this beam only
                values = np.full(n_shots, np.nan)
            else:
                found.add(field)
            accumulated[field].append(values)

    if granule.n_beams == 0:
        logger.warning("No beam groups found in granule %s", granule.file_path)
        found = set(columns)

    missing = [field for field in columns if field not in found]
    if missing:
        logger.warning(
            "Fields %s not found in granule %s. Columns skipped.",
            missing,
            granule.file_path,
        )

    data = {}
    for field in columns:
        if field in missing:
            continue
        chunks = accumulated[field]
        if chunks:
            data[field] = np.concatenate(chunks)
        else:
            dtype = np.uint64 if field == SHOT_NUMBER else np.float64
            data[field] = np.array([], dtype=dtype)
    return pd.DataFrame(data)


def get_level1b_geo(
    granule: GediGranule,
    select: Optional[Iterable[str]] = LEVEL1B_DEFAULT_SELECT,
    progress: bool = False,
) -> pd.DataFrame:
    """
    Extract the full waveform geolocations of all shots in a GEDI level 1B granule.

    The bin0/lastbin latitudes and longitudes and the shot number are always
    extracted; `select` adds further fields, looked up by dataset name anywhere
    inside the beam groups (e.g. "elevation_bin0", "rx_energy", "solar_elevation").

    Args:
        granule (GediGranule): An open level 1B granule.
        select (Optional[Iterable[str]], optional): Additional fields to extract,
            None for the always extracted fields only.
            Defaults to ("elevation_bin0", "elevation_lastbin").
        progress (bool, optional): Show a progress bar over beams.
            Defaults to False.

    Raises:
        ValueError: If a selected dataset does not hold one value per shot.

    Returns:
        pd.DataFrame: One row per shot, beams concatenated in file order.
            shot_number comes first and keeps its integer type. Fields that exist
            nowhere in the granule are left out (with a warning), fields missing
            from some beams only are NaN for those beams.
    """
    return _extract_geo_table(granule, LEVEL1B_GEO_FIELDS, select, progress)


def get_level2a_geo(
    granule: GediGranule,
    select: Optional[Iterable[str]] = LEVEL2A_DEFAULT_SELECT,
    progress: bool = False,
) -> pd.DataFrame:
    """
    Extract the lowest mode geolocations of all shots in a GEDI level 2A granule.

    Same as `get_level1b_geo`, with lat_lowestmode, lon_lowestmode and
    shot_number as the fields always extracted.
    """
    return _extract_geo_table(granule, LEVEL2A_GEO_FIELDS, select, progress)
