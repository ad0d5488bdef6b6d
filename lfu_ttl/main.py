from lfu_ttl.cache.lfu_ttl_cache import LFUTTLCache
from lfu_ttl.config import CONFIG
from lfu_ttl.workload.synthetic_generator import WorkloadGenerator
from lfu_ttl.benchmarks.lru import LRUCache
from lfu_ttl.benchmarks.lfu import LFUCacheWrapper
from lfu_ttl.benchmarks.ttl import TTLCacheWrapper
from lfu_ttl.benchmarks.fifo import FIFOCache
from lfu_ttl.metrics.excel_logger import ExcelLogger
from typing import Callable, Dict, List, Optional, Tuple
import psutil
import os
import time
import gc
import sys
import json

CACHE_NAMES = ["LFU-TTL", "LRU", "LFU", "TTL", "FIFO"]


def build_cache(cache_name: str, cache_size: int, config: dict = CONFIG):
    """Create a fresh cache by name; all of them expose get/put/summary/monitor."""
    timeout = config.get("invalidation_timeout", CONFIG["invalidation_timeout"])
    if cache_name == "LFU-TTL":
        return LFUTTLCache.from_config(config, max_entries=cache_size)
    elif cache_name == "LRU":
        return LRUCache(max_size=cache_size)
    elif cache_name == "LFU":
        return LFUCacheWrapper(max_size=cache_size)
    elif cache_name == "TTL":
        return TTLCacheWrapper(max_size=cache_size, ttl=timeout)
    elif cache_name == "FIFO":
        return FIFOCache(max_size=cache_size)
    raise ValueError(f"Unknown cache type: {cache_name}")


def build_workloads(config: dict = CONFIG) -> Dict[str, Callable[[], List[Tuple[str, str]]]]:
    params = config["benchmark"]
    gen = WorkloadGenerator(key_space_size=params["key_space_size"],
                            num_requests=params["num_requests"],
                            seed=params.get("seed"))
    return {
        "Uniform": lambda: gen.generate_uniform_workload(),
        "Zipf": lambda: gen.generate_zipf_workload(alpha=params["zipf_alpha"]),
        "Bursty": lambda: gen.generate_bursty_workload(burst_size=params["burst_size"],
                                                       burst_freq=params["burst_freq"]),
        "Phase": lambda: gen.generate_phase_workload(phase_length=params["phase_length"],
                                                     num_phases=params["num_phases"]),
        "Mixed": lambda: gen.generate_mixed_workload(zipf_alpha=params["zipf_alpha"],
                                                     burst_freq=params["burst_freq"] / 2)
    }


def replay_workload(cache, workload: List[Tuple[str, str]], cache_name: str, workload_name: str,
                    logger: Optional[ExcelLogger] = None, window_size: int = 50) -> dict:
    """Replay a workload (get, then put on every request) and return the cache summary."""
    process = psutil.Process(os.getpid())

    # Reset cache and monitor before each workload test
    cache.reset()
    gc.collect()

    start_time = time.perf_counter()

    # For per-window CPU percent (delta method)
    prev_cpu_time = process.cpu_times().user + process.cpu_times().system
    prev_wall_time = time.perf_counter()
    cpu_percent_window = []
    last_cpu_percent = 0.0

    for step, (key, value) in enumerate(workload):
        cache.get(key)

        if logger is not None:
            cpu_time_now = process.cpu_times().user + process.cpu_times().system
            wall_time_now = time.perf_counter()
            delta_wall = wall_time_now - prev_wall_time
            cpu_percent_window.append((cpu_time_now - prev_cpu_time) / delta_wall * 100 if delta_wall > 0 else 0.0)
            prev_cpu_time = cpu_time_now
            prev_wall_time = wall_time_now

            # Log every window, otherwise carry the last known value
            if (step + 1) % window_size == 0 or (step + 1) == len(workload):
                last_cpu_percent = sum(cpu_percent_window) / len(cpu_percent_window)
                cpu_percent_window = []
                cache.monitor.record_memory_usage()
                cache.monitor.record_cpu_usage()

            monitor = cache.monitor
            logger.log(
                step=step,
                hit_rate=monitor.get_hit_ratio(),
                hits=monitor.hits,
                misses=monitor.misses,
                memory_mb=process.memory_info().rss / (1024 * 1024),
                cpu_time_delta=last_cpu_percent,
                timestamp=time.perf_counter() - start_time,
                size=cache.size(),
                buckets=len(cache.frequency_counts()) if hasattr(cache, 'frequency_counts') else 0,
                evictions=monitor.get_eviction_count(),
                expirations=monitor.get_expiration_count(),
                cache_name=cache_name,
                workload_name=workload_name
            )

        cache.put(key, value)

    summary = cache.summary()
    summary["seconds"] = time.perf_counter() - start_time
    print(f"{cache_name} with {workload_name} - {summary}")
    return summary


def main(config: dict = CONFIG) -> Dict[Tuple[str, str], dict]:
    params = config["benchmark"]
    logger = ExcelLogger(filename=params["results_file"])
    workloads = build_workloads(config)

    results = {}
    for cache_name in CACHE_NAMES:
        cache = build_cache(cache_name, config["cache_size"], config)
        for workload_name, generate_workload in workloads.items():
            results[(cache_name, workload_name)] = replay_workload(
                cache, generate_workload(), cache_name, workload_name,
                logger=logger, window_size=params["log_window"])
        print("----------------------------------------------------------------------------------")
    logger.export()
    return results


def run_single_test(config_path: str) -> dict:
    """Run a single test with the given configuration."""
    with open(config_path, 'r') as f:
        test_config = json.load(f)

    cache_name = test_config["cache_name"]
    cache = build_cache(cache_name, test_config["cache_size"])

    # Use the provided workload data
    workload = [tuple(request) for request in test_config["workload_data"]]
    return replay_workload(cache, workload, cache_name, test_config["workload_name"])


if __name__ == "__main__":
    if len(sys.argv) == 2:
        # Run single test with configuration file
        run_single_test(sys.argv[1])
    elif len(sys.argv) == 1:
        main()
    else:
        print("Usage: python -m lfu_ttl.main [config_file]")
        sys.exit(1)
