from pathlib import Path
import logging
import os
import sys
from logging.handlers import RotatingFileHandler

# Project root -> .../medibook
ROOT = Path(__file__).resolve().parent.parent

LOG_DIR = Path(os.getenv("LOG_DIR", ROOT / "logs"))
LOG_FILE = LOG_DIR / "app.log"
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

FMT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def setup_logging() -> None:
    LOG_DIR.mkdir(parents=True, exist_ok=True)

    # Clear any existing handlers (prevents duplicates with --reload)
    for h in logging.root.handlers[:]:
        logging.root.removeHandler(h)

    file_h = RotatingFileHandler(
        LOG_FILE, maxBytes=50*1024*1024, backupCount=5, encoding="utf-8"
    )
    file_h.setFormatter(logging.Formatter(FMT))

    console_h = logging.StreamHandler(sys.stdout)
    console_h.setFormatter(logging.Formatter(FMT))

    logging.basicConfig(level=LOG_LEVEL, handlers=[file_h, console_h])

    # Make uvicorn logs go to the same handlers
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        l = logging.getLogger(name)
        l.setLevel(LOG_LEVEL)
        l.handlers = [file_h, console_h]
        l.propagate = False

    logging.getLogger("log_setup").info("Logging to: %s", LOG_FILE)
