# Synthetic request traces for replaying through caches
from typing import List, Optional, Tuple
import numpy as np


class WorkloadGenerator:
    def __init__(self, key_space_size: int, num_requests: int, seed: Optional[int] = None):
        self.key_space_size = key_space_size
        self.num_requests = num_requests
        self.rng = np.random.default_rng(seed)

    def _to_workload(self, key_ids) -> List[Tuple[str, str]]:
        return [(f"key_{k}", f"value_{k}") for k in key_ids]

    def generate_uniform_workload(self) -> List[Tuple[str, str]]:
        """Every key equally likely."""
        key_ids = self.rng.integers(0, self.key_space_size, size=self.num_requests)
        return self._to_workload(key_ids)

    def generate_zipf_workload(self, alpha: float = 1.2) -> List[Tuple[str, str]]:
        """Skewed popularity: key rank r is requested with probability ~ 1/r^alpha."""
        ranks = np.arange(1, self.key_space_size + 1)
        weights = 1.0 / np.power(ranks, alpha)
        weights /= weights.sum()
        key_ids = self.rng.choice(self.key_space_size, size=self.num_requests, p=weights)
        return self._to_workload(key_ids)

    def generate_bursty_workload(self, burst_size: int = 5, burst_freq: float = 0.2) -> List[Tuple[str, str]]:
        """Uniform background traffic with runs of repeated requests for one key."""
        key_ids = []
        while len(key_ids) < self.num_requests:
            key = int(self.rng.integers(0, self.key_space_size))
            if self.rng.random() < burst_freq:
                key_ids.extend([key] * burst_size)
            else:
                key_ids.append(key)
        return self._to_workload(key_ids[:self.num_requests])

    def generate_phase_workload(self, phase_length: int = 100, num_phases: int = 10) -> List[Tuple[str, str]]:
        """Working set shifts every `phase_length` requests, cycling through `num_phases` disjoint sets."""
        set_size = max(1, self.key_space_size // num_phases)
        key_ids = []
        for i in range(self.num_requests):
            phase = (i // phase_length) % num_phases
            key_ids.append(phase * set_size + int(self.rng.integers(0, set_size)))
        return self._to_workload(key_ids)

    def generate_mixed_workload(self, zipf_alpha: float = 1.2, burst_freq: float = 0.1) -> List[Tuple[str, str]]:
        """Half zipf, half bursty, interleaved at random."""
        zipf = self.generate_zipf_workload(alpha=zipf_alpha)
        bursty = self.generate_bursty_workload(burst_freq=burst_freq)
        mask = self.rng.random(self.num_requests) < 0.5
        return [z if pick else b for z, b, pick in zip(zipf, bursty, mask)]
