import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DOTENV_PATH = Path(__file__).resolve().parent / ".env"
LOG_LEVEL_KEY = "LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


@lru_cache(maxsize=1)
def load_environment(dotenv_path: Path = DOTENV_PATH) -> Optional[Path]:
    """
    Load relay variables from a .env file when one exists.

    Variables already set in the process environment take precedence.
    Returns the file that was loaded, or None.
    """
    if not dotenv_path.exists():
        return None
    load_dotenv(dotenv_path=dotenv_path, override=False)
    return dotenv_path


def configure_logging(level: Optional[str] = None) -> None:
    resolved = (level or os.getenv(LOG_LEVEL_KEY) or "INFO").upper()
    logging.basicConfig(level=getattr(logging, resolved, logging.INFO), format=LOG_FORMAT)
