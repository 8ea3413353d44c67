from __future__ import annotations
import logging
from rich.logging import RichHandler

def setup_logging(level: str|int="WARNING"):
    """Route thinplatekit records through rich; library modules never configure handlers."""
    handler = RichHandler(show_path=False, rich_tracebacks=True)
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    logger = logging.getLogger("thinplatekit")
    logger.handlers[:] = [handler]
    logger.setLevel(level.upper() if isinstance(level, str) else level)
    logger.propagate = False
    return logger
