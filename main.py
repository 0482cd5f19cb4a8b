# main.py
"""
Startpunkt: `uvicorn main:app` oder `python main.py`.
"""
import logging
import sys
from typing import Optional

from docqa.api import app  # noqa: F401

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: int = logging.INFO, logger: Optional[logging.Logger] = None) -> logging.Logger:
    """Hängt einen stdout-Handler an, falls noch keiner da ist (uvicorn bringt evtl. eigene mit)."""
    target = logger or logging.getLogger()
    if not target.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        target.addHandler(handler)
        target.setLevel(level)
    return target


configure_logging()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("main:app", host="0.0.0.0", port=8080)
