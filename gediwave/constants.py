"""Module contains all project wide constants."""
import re


# ---------------- PROJECT CONSTANTS ----------------
# Coordinate reference systems (crs)
WGS84 = "EPSG:4326"  # WGS84 standard crs (latitude, longitude)

# Top level groups holding per-beam data, e.g. BEAM0000, BEAM0101
BEAM_PATTERN = re.compile(r"BEAM\d{4}$")

SHOT_NUMBER = "shot_number"

# Fields always extracted, whatever the caller selects
LEVEL1B_GEO_FIELDS = (
    "latitude_bin0",
    "latitude_lastbin",
    "longitude_bin0",
    "longitude_lastbin",
    SHOT_NUMBER,
)
LEVEL1B_DEFAULT_SELECT = ("elevation_bin0", "elevation_lastbin")

LEVEL2A_GEO_FIELDS = ("lat_lowestmode", "lon_lowestmode", SHOT_NUMBER)
LEVEL2A_DEFAULT_SELECT = ("elev_lowestmode",)

# (x, y) column pairs tested by the clipping functions
LEVEL1B_BIN0_POINT = ("longitude_bin0", "latitude_bin0")
LEVEL1B_LASTBIN_POINT = ("longitude_lastbin", "latitude_lastbin")
LEVEL2A_LOWESTMODE_POINT = ("lon_lowestmode", "lat_lowestmode")

# Column added to clipped tables when splitting by a polygon attribute
POLYGON_ID_COLUMN = "poly_id"
