"""
Metrics Collection - Monitoring Layer

In-process counters rendered in the Prometheus text exposition format and
served at /metrics.

@.architecture
Incoming: api/endpoints/*.py, app.py (/metrics) --- {counter names, label values, increments}
Processing: Counter.inc(), Counter.render(), MetricsRegistry.export_prometheus() --- {3 jobs: recording, collection, export}
Outgoing: /metrics endpoint --- {Counter instances, str Prometheus text format}
"""

import threading
from typing import Dict, Iterable, List, Optional, Tuple

LabelKey = Tuple[str, ...]


def _escape(value: str) -> str:
    """Escape a label value for the text format."""
    return value.replace('\\', '\\\\').replace('"', '\\"').replace('\n', '\\n')


class Counter:
    """
    Monotonic counter with a fixed set of label names.

    Every increment must name exactly those labels, e.g.
    ``file_operations.inc(operation="upload", status="success")``.
    """

    def __init__(self, name: str, help_text: str, labels: Optional[List[str]] = None):
        self.name = name
        self.help_text = help_text
        self.label_names = list(labels or [])
        self._lock = threading.Lock()
        self._values: Dict[LabelKey, float] = {}

    def _key(self, labels: Dict[str, str]) -> LabelKey:
        if sorted(labels) != sorted(self.label_names):
            raise ValueError(f"Expected labels {self.label_names}, got {list(labels)}")
        return tuple(str(labels[name]) for name in self.label_names)

    def inc(self, amount: float = 1.0, **labels: str) -> None:
        """
        Add amount to the series selected by labels.

        Raises:
            ValueError: If amount is negative or the label names don't match
        """
        if amount < 0:
            raise ValueError(f"Counter {self.name} cannot decrease (got {amount})")

        key = self._key(labels)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def get(self, **labels: str) -> float:
        """Current value of one series; 0.0 if it was never incremented."""
        key = self._key(labels)
        with self._lock:
            return self._values.get(key, 0.0)

    def collect(self) -> List[Tuple[Dict[str, str], float]]:
        """Snapshot of every series as (labels, value) pairs."""
        with self._lock:
            items = list(self._values.items())
        return [(dict(zip(self.label_names, key)), value) for key, value in items]

    def render(self) -> Iterable[str]:
        """Text-format lines for this counter."""
        yield f"# HELP {self.name} {self.help_text}"
        yield f"# TYPE {self.name} counter"
        for labels, value in self.collect():
            if labels:
                pairs = ",".join(f'{k}="{_escape(v)}"' for k, v in labels.items())
                yield f"{self.name}{{{pairs}}} {value}"
            else:
                yield f"{self.name} {value}"


class MetricsRegistry:
    """Counters by name; asking twice for a name returns the same counter."""

    def __init__(self):
        self._lock = threading.Lock()
        self._counters: Dict[str, Counter] = {}

    def counter(self, name: str, help_text: str, labels: Optional[List[str]] = None) -> Counter:
        with self._lock:
            existing = self._counters.get(name)
            if existing is None:
                existing = self._counters[name] = Counter(name, help_text, labels)
            return existing

    def export_prometheus(self) -> str:
        """All counters in the Prometheus text exposition format."""
        with self._lock:
            counters = list(self._counters.values())

        lines: List[str] = []
        for metric in counters:
            lines.extend(metric.render())
        return "\n".join(lines) + "\n"


_registry = MetricsRegistry()


def get_registry() -> MetricsRegistry:
    """Process-wide registry backing /metrics."""
    return _registry


def counter(name: str, help_text: str, labels: Optional[List[str]] = None) -> Counter:
    """Get or create a counter in the process-wide registry."""
    return _registry.counter(name, help_text, labels)
