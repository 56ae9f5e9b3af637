"""Clipping of GEDI shot tables by bounding box or polygon geometry"""
from typing import Optional, Sequence, Tuple

import geopandas as gpd
import numpy as np
import pandas as pd

from gediwave.constants import (
    LEVEL1B_BIN0_POINT,
    LEVEL1B_LASTBIN_POINT,
    LEVEL2A_LOWESTMODE_POINT,
    POLYGON_ID_COLUMN,
)
from gediwave.utils.logging_util import get_logger

logger = get_logger(__name__)

Point = Tuple[str, str]

_ROW_ID = "_row_id"
_POLYGON_ORDER = "_polygon_order"


class ConfigurationError(ValueError):
    """Used when a polygon attribute requested by the caller does not exist"""

    def __init__(self, field: str, available: Sequence[str]):
        self.field = field
        super().__init__(
            f"The {field} is not included in the attribute table. "
            f"Please check the names in the attribute table: {list(available)}"
        )


def _bbox_mask(
    table: pd.DataFrame,
    points: Sequence[Point],
    xmin: float,
    xmax: float,
    ymin: float,
    ymax: float,
) -> np.ndarray:
    """Boolean mask of rows where all `points` fall inside the closed box."""
    mask = np.ones(len(table), dtype=bool)
    for x_col, y_col in points:
        x = table[x_col].to_numpy(dtype=np.float64)
        y = table[y_col].to_numpy(dtype=np.float64)
        mask &= np.isfinite(x) & np.isfinite(y)
        mask &= (x >= xmin) & (x <= xmax) & (y >= ymin) & (y <= ymax)
    return mask


def _clip_by_bbox(
    table: pd.DataFrame,
    points: Sequence[Point],
    xmin: float,
    xmax: float,
    ymin: float,
    ymax: float,
) -> pd.DataFrame:
    mask = _bbox_mask(table, points, xmin, xmax, ymin, ymax)
    clipped = table.iloc[np.flatnonzero(mask)].reset_index(drop=True)
    if clipped.empty:
        logger.warning("The bounding box does not overlap the GEDI data.")
    return clipped


def _clip_by_geometry(
    table: pd.DataFrame,
    polygons: gpd.GeoDataFrame,
    points: Sequence[Point],
    split_by: Optional[str],
) -> pd.DataFrame:
    """
    Keep the rows whose first point lies in at least one polygon.

    All `points` are used for the bounding box pre-clip on the polygons' extent,
    only the first one is tested against the polygons.
    """
    geometry_column = polygons.geometry.name
    attributes = [c for c in polygons.columns if c != geometry_column]
    if split_by is not None and split_by not in attributes:
        raise ConfigurationError(split_by, attributes)

    xmin, ymin, xmax, ymax = polygons.total_bounds
    table = _clip_by_bbox(table, points, xmin, xmax, ymin, ymax)
    if table.empty:
        return _with_polygon_id(table, split_by, [])

    x_col, y_col = points[0]
    shots = gpd.GeoDataFrame(
        {_ROW_ID: np.arange(len(table))},
        geometry=gpd.points_from_xy(table[x_col], table[y_col]),
        crs=polygons.crs,
    )
    right = polygons.reset_index(drop=True)
    right[_POLYGON_ORDER] = np.arange(len(right))
    keep = [_POLYGON_ORDER, geometry_column]
    if split_by is not None:
        keep.insert(0, split_by)

    joined = gpd.sjoin(shots, right[keep], how="inner", predicate="intersects")
    # a shot inside overlapping polygons goes to the first polygon
    joined = joined.sort_values(
        [_ROW_ID, _POLYGON_ORDER], kind="stable"
    ).drop_duplicates(subset=_ROW_ID, keep="first")
    logger.debug(
        "%s of %s shots inside %s polygons", len(joined), len(table), len(right)
    )

    clipped = table.iloc[joined[_ROW_ID].to_numpy()].reset_index(drop=True)
    if clipped.empty:
        logger.warning("The polygon does not overlap the GEDI data.")
    poly_ids = joined[split_by].to_numpy() if split_by is not None else []
    return _with_polygon_id(clipped, split_by, poly_ids)


def _with_polygon_id(
    table: pd.DataFrame, split_by: Optional[str], poly_ids
) -> pd.DataFrame:
    if split_by is None:
        return table
    table = table.copy()
    table[POLYGON_ID_COLUMN] = poly_ids
    return table


def clip_level1b_geo(
    level1b_geo: pd.DataFrame,
    xmin: float,
    xmax: float,
    ymin: float,
    ymax: float,
) -> pd.DataFrame:
    """
    Clip GEDI full waveform geolocations by a bounding box.

    A shot is kept only if both its bin0 and lastbin (longitude, latitude)
    positions fall within the box, bounds included. Shots with missing
    coordinates are dropped.

    Args:
        level1b_geo (pd.DataFrame): Geolocations as returned by `get_level1b_geo`.
        xmin (float): West longitude of the box, in decimal degrees.
        xmax (float): East longitude of the box, in decimal degrees.
        ymin (float): South latitude of the box, in decimal degrees.
        ymax (float): North latitude of the box, in decimal degrees.

    Returns:
        pd.DataFrame: The shots within the box in their original order. Empty
            (with a warning logged) if the box does not overlap the data.
    """
    return _clip_by_bbox(
        level1b_geo,
        (LEVEL1B_BIN0_POINT, LEVEL1B_LASTBIN_POINT),
        xmin,
        xmax,
        ymin,
        ymax,
    )


def clip_level1b_geo_geometry(
    level1b_geo: pd.DataFrame,
    polygons: gpd.GeoDataFrame,
    split_by: Optional[str] = None,
) -> pd.DataFrame:
    """
    Clip GEDI full waveform geolocations by polygon geometries.

    The geolocations are first clipped to the extent of `polygons`, then the
    bin0 position of each remaining shot is intersected with the polygons.
    Coordinates are used as they are, `polygons` must share the CRS of the
    geolocations (WGS84 longitude/latitude for GEDI).

    Args:
        level1b_geo (pd.DataFrame): Geolocations as returned by `get_level1b_geo`.
        polygons (gpd.GeoDataFrame): The polygons to clip by, with attributes.
        split_by (Optional[str], optional): Attribute of `polygons` identifying
            each polygon. Its value for the containing polygon is stored in a
            `poly_id` column. Defaults to None, no column is added.

    Raises:
        ConfigurationError: If `split_by` is not an attribute of `polygons`.

    Returns:
        pd.DataFrame: The shots inside at least one polygon, in their original
            order. A shot inside several overlapping polygons is kept once and
            assigned to the first of them. Empty (with a warning logged) if the
            polygons do not overlap the data.
    """
    return _clip_by_geometry(
        level1b_geo,
        polygons,
        (LEVEL1B_BIN0_POINT, LEVEL1B_LASTBIN_POINT),
        split_by,
    )


def clip_level2a_geo(
    level2a_geo: pd.DataFrame,
    xmin: float,
    xmax: float,
    ymin: float,
    ymax: float,
) -> pd.DataFrame:
    """Clip GEDI level 2A lowest mode geolocations by a bounding box."""
    return _clip_by_bbox(
        level2a_geo, (LEVEL2A_LOWESTMODE_POINT,), xmin, xmax, ymin, ymax
    )


def clip_level2a_geo_geometry(
    level2a_geo: pd.DataFrame,
    polygons: gpd.GeoDataFrame,
    split_by: Optional[str] = None,
) -> pd.DataFrame:
    """Clip GEDI level 2A lowest mode geolocations by polygon geometries."""
    return _clip_by_geometry(
        level2a_geo, polygons, (LEVEL2A_LOWESTMODE_POINT,), split_by
    )
