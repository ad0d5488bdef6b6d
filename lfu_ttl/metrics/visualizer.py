import matplotlib.pyplot as plt
from .monitor import MetricsMonitor
from typing import Dict, Optional


class MetricsVisualizer:
    def __init__(self, monitor: MetricsMonitor):
        """Initialize with a MetricsMonitor instance."""
        self.monitor = monitor

    @staticmethod
    def _finish(output_file: Optional[str]) -> None:
        plt.grid(True)
        plt.legend()
        if output_file:
            plt.savefig(output_file)
        else:
            plt.show()
        plt.close()

    def plot_hit_miss_ratio(self, output_file: Optional[str] = None) -> None:
        """Plot the cumulative hit ratio over the recorded operations."""
        operations = list(self.monitor.operations)
        if not operations:
            return
        start = operations[0]["time"]
        times = [op["time"] - start for op in operations]
        hit_ratios = []
        hits = 0
        for i, op in enumerate(operations):
            hits += op["hit"]
            hit_ratios.append(hits / (i + 1))

        plt.figure(figsize=(10, 6))
        plt.plot(times, hit_ratios, label="Hit Ratio")
        plt.xlabel("Time (seconds)")
        plt.ylabel("Hit Ratio")
        plt.title("Hit Ratio Over Time")
        self._finish(output_file)

    def plot_memory_usage(self, output_file: Optional[str] = None) -> None:
        """Plot memory usage over time."""
        if not self.monitor.memory_usage:
            return
        start = self.monitor.memory_usage[0]["time"]
        times = [m["time"] - start for m in self.monitor.memory_usage]
        memory = [m["memory_mb"] for m in self.monitor.memory_usage]

        plt.figure(figsize=(10, 6))
        plt.plot(times, memory, label="Memory Usage (MB)")
        plt.xlabel("Time (seconds)")
        plt.ylabel("Memory Usage (MB)")
        plt.title("Memory Usage Over Time")
        self._finish(output_file)

    @staticmethod
    def plot_frequency_distribution(frequency_counts: Dict[int, int], output_file: Optional[str] = None) -> None:
        """Bar chart of keys per frequency bucket, e.g. from LFUTTLCache.frequency_counts()."""
        plt.figure(figsize=(10, 6))
        plt.bar([str(f) for f in frequency_counts], list(frequency_counts.values()), label="Keys")
        plt.xlabel("Access Frequency")
        plt.ylabel("Number of Keys")
        plt.title("Frequency Bucket Distribution")
        MetricsVisualizer._finish(output_file)
