"""Debug trace events emitted while searching."""

from typing import Any, Callable, Optional
import logging

logger = logging.getLogger(__name__)

TraceSink = Callable[[str, dict], None]


class Tracer:
    """
    Forwards trace events to a sink and, when verbose, to the debug log.

    Callers check `enabled` before building an event so a disabled tracer
    costs nothing.
    """

    def __init__(self, sink: Optional[TraceSink] = None, verbose: bool = False):
        self.sink = sink
        self.verbose = verbose
        self.enabled = sink is not None or verbose

    def emit(self, event: str, **payload: Any) -> None:
        if self.sink is not None:
            self.sink(event, payload)
        if self.verbose:
            logger.debug(f"{event}: {payload}")


NULL_TRACER = Tracer()
