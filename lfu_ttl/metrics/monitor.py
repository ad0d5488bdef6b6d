from collections import deque
from typing import Dict
from time import time
import psutil
import os


class MetricsMonitor:
    def __init__(self, recent_window: int = 1000, cpu_window_size: int = 50):
        """Initialize the metrics monitor."""
        self.hits: int = 0
        self.misses: int = 0
        self.operation_count: int = 0
        self.operations: deque = deque(maxlen=recent_window)  # Recent operations only
        self.memory_usage: deque = deque(maxlen=recent_window)
        self.cpu_usage: deque = deque(maxlen=recent_window)
        self.process = psutil.Process(os.getpid())  # Process for CPU/memory
        self.evictions: deque = deque(maxlen=recent_window)
        self.eviction_count = 0
        self.expiration_count = 0
        self.removal_count = 0
        self.cpu_window_size = cpu_window_size  # Measure CPU over this many samples
        self.cpu_window_start = time()
        self.cpu_window_ops = 0

    def record_operation(self, op_type: str, key, hit: bool) -> None:
        """Record a cache lookup."""
        if hit:
            self.hits += 1
        else:
            self.misses += 1
        self.operation_count += 1
        self.operations.append({
            "time": time(),
            "type": op_type,
            "key": key,
            "hit": hit,
            "total_ops": self.hits + self.misses
        })

    def record_eviction(self, key, frequency: int) -> None:
        """Record a capacity eviction and the frequency the key had reached."""
        self.evictions.append({
            "time": time(),
            "key": key,
            "frequency": frequency
        })
        self.eviction_count += 1

    def record_expiration(self, key) -> None:
        self.expiration_count += 1

    def record_removal(self, key) -> None:
        self.removal_count += 1

    def record_memory_usage(self) -> None:
        """Record current process memory usage."""
        memory_mb = self.process.memory_info().rss / 1024 / 1024  # Convert to MB
        self.memory_usage.append({
            "time": time(),
            "memory_mb": memory_mb
        })

    def record_cpu_usage(self) -> None:
        """Record current process CPU usage over a window of samples."""
        self.cpu_window_ops += 1

        # Only measure CPU after a window of samples
        if self.cpu_window_ops >= self.cpu_window_size:
            window_end = time()
            cpu_percent = self.process.cpu_percent(interval=None)
            cpu_per_op = cpu_percent / self.cpu_window_ops

            self.cpu_usage.append({
                "time": window_end,
                "cpu_percent": cpu_per_op
            })

            self.cpu_window_start = window_end
            self.cpu_window_ops = 0
        else:
            # Use last known CPU value for intermediate samples
            last = self.cpu_usage[-1]["cpu_percent"] if self.cpu_usage else 0.0
            self.cpu_usage.append({
                "time": time(),
                "cpu_percent": last
            })

    def get_hit_ratio(self) -> float:
        """Calculate the current hit ratio."""
        total = self.hits + self.misses
        return self.hits / total if total > 0 else 0.0

    def get_eviction_count(self) -> int:
        return self.eviction_count

    def get_expiration_count(self) -> int:
        return self.expiration_count

    def reset(self) -> None:
        """Reset all metrics."""
        self.hits = 0
        self.misses = 0
        self.operation_count = 0
        self.operations.clear()
        self.memory_usage.clear()
        self.cpu_usage.clear()
        self.evictions.clear()
        self.eviction_count = 0
        self.expiration_count = 0
        self.removal_count = 0
        self.cpu_window_start = time()
        self.cpu_window_ops = 0

    def summary(self) -> Dict:
        """Return a summary of collected metrics."""
        return {
            "hits": self.hits,
            "misses": self.misses,
            "hit_ratio": self.get_hit_ratio(),
            "total_operations": self.operation_count,
            "memory_samples": len(self.memory_usage),
            "cpu_samples": len(self.cpu_usage),
            "avg_memory_mb": sum(m["memory_mb"] for m in self.memory_usage) / (len(self.memory_usage) or 1),
            "avg_cpu_percent": sum(c["cpu_percent"] for c in self.cpu_usage) / (len(self.cpu_usage) or 1),
            "evictions": self.eviction_count,
            "expirations": self.expiration_count,
            "removals": self.removal_count
        }
