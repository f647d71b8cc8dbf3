"""Structured analysis events delivered to an optional caller-supplied sink"""

from dataclasses import dataclass, field, asdict
from datetime import datetime
from typing import Any, Callable, Dict, Optional


@dataclass(frozen=True)
class AnalysisEvent:
    analyzer: str
    message: str
    level: str = "info"
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: datetime.now().isoformat())

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


EventSink = Callable[[AnalysisEvent], None]


class EventEmitter:
    """Binds an analyzer name to an optional sink.

    Without a sink every call is a no-op, so analyzers can emit
    unconditionally.
    """

    def __init__(self, analyzer: str, sink: Optional[EventSink] = None):
        self.analyzer = analyzer
        self.sink = sink

    def emit(self, message: str, level: str = "info", **data):
        if self.sink is None:
            return
        self.sink(AnalysisEvent(
            analyzer=self.analyzer,
            message=message,
            level=level,
            data=data,
        ))

    def __bool__(self) -> bool:
        return self.sink is not None
