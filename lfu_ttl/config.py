CONFIG = {
    # Total number of items the cache can hold
    "cache_size": 1024,

    # Seconds after insertion before an entry is considered invalid
    "invalidation_timeout": 30.0,

    # Scan for expired entries on every get/put (False = only on explicit purge)
    "eager_purge": True,

    # Operation monitor parameters
    "monitor": {
        "recent_window": 1000,  # Keep the last 1000 operations/evictions
        "cpu_window_size": 50  # Measure CPU over 50 samples
    },

    # Benchmark harness parameters
    "benchmark": {
        "key_space_size": 5000,
        "num_requests": 50000,
        "zipf_alpha": 1.2,
        "burst_size": 5,
        "burst_freq": 0.2,
        "phase_length": 100,
        "num_phases": 10,
        "log_window": 50,  # Average CPU over 50 steps
        "seed": 42,
        "results_file": "all_cache_metrics.xlsx"
    }
}
