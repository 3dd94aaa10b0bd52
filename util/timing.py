# util/timing.py
import logging
import time
from contextlib import contextmanager
from typing import Any, Iterator


@contextmanager
def timed(logger: logging.Logger, name: str, **kv: Any) -> Iterator[None]:
    """
    Usage:
      with timed(logger, "vision.extract", model="gemini-2.0-flash"):
          ...
    Emits "<name>.done ms=<int> key=val ..." at INFO on success and
    "<name>.failed ms=<int> err=<type> key=val ..." at WARNING when the block raises.
    The exception is never swallowed.
    """
    t0 = time.perf_counter()
    suffix = "".join(f" {k}={v}" for k, v in kv.items())
    try:
        yield
    except BaseException as e:
        dt_ms = int((time.perf_counter() - t0) * 1000)
        logger.warning("%s.failed ms=%d err=%s%s", name, dt_ms, type(e).__name__, suffix)
        raise
    dt_ms = int((time.perf_counter() - t0) * 1000)
    logger.info("%s.done ms=%d%s", name, dt_ms, suffix)
