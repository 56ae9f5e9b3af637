import logging
import os
from pathlib import Path

import dotenv

dotenv.load_dotenv()

# ---------------- PATH CONSTANTS -------------------
#  Source folder path
constants_path = Path(__file__)
SRC_PATH = constants_path.parent
PROJECT_PATH = SRC_PATH.parent

# Log related paths
LOG_PATH = Path(os.getenv("GEDIWAVE_LOG_PATH", PROJECT_PATH / "logs"))
LOG_PATH.mkdir(parents=True, exist_ok=True)


# ---------------- LOGGING CONSTANTS ----------------
DEFAULT_FORMATTER = logging.Formatter(
    (
        "%(asctime)s %(levelname)s: %(message)s "
        "[in %(funcName)s at %(pathname)s:%(lineno)d]"
    )
)
DEFAULT_LOG_FILE = LOG_PATH / "default_log.log"
DEFAULT_LOG_LEVEL = logging.getLevelName(
    os.getenv("GEDIWAVE_LOG_LEVEL", "INFO").upper()
)
