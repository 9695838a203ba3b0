import logging
import time
from typing import Callable

logger = logging.getLogger(__name__)


def wait_until(
    predicate: Callable[[], bool],
    attempts: int,
    interval: float,
    sleep: Callable[[float], None] = time.sleep,
) -> bool:
    """
    Call `predicate` up to `attempts` times, sleeping `interval` seconds after
    each miss. Blocks the calling thread; not cancellable.

    Returns:
        True as soon as the predicate holds, False once attempts run out.
    """
    for attempt in range(1, attempts + 1):
        if predicate():
            return True
        logger.debug(f"Not ready yet (attempt {attempt}/{attempts})")
        sleep(interval)
    return False
