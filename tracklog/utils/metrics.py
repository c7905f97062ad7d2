from typing import Sequence
from prometheus_client import CollectorRegistry, Counter, generate_latest

class MetricsManager:
    """Process-wide registry for tracklog metrics, exported in Prometheus format."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(MetricsManager, cls).__new__(cls)
            cls._instance.metrics = {}
            cls._instance.prom_registry = CollectorRegistry()
        return cls._instance

    def counter(self, name: str, description: str = "", labelnames: Sequence[str] = ()) -> Counter:
        # First registration fixes the label set for a name
        if name not in self.metrics:
            self.metrics[name] = Counter(name, description or f"Counter for {name}",
                                         labelnames=tuple(labelnames), registry=self.prom_registry)
        return self.metrics[name]

    def export(self) -> bytes:
        return generate_latest(self.prom_registry)
