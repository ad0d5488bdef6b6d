import pandas as pd
import numpy as np
import os

WORKLOAD_ORDER = ['Uniform', 'Zipf', 'Bursty', 'Phase', 'Mixed']
NUMERIC_COLUMNS = ['hit_rate', 'memory_mb', 'cpu_time_delta', 'seconds',
                   'size', 'buckets', 'evictions', 'expirations']


class ExcelLogger:
    def __init__(self, filename="cache_metrics.xlsx"):
        self.filename = filename
        self.records = {}
        self._file_cleared = False  # Clear an existing file only on this logger's first export

    def log(self, step, hit_rate, hits, misses, memory_mb, cpu_time_delta, timestamp,
            size, cache_name, workload_name, buckets=0, evictions=0, expirations=0):
        self.records.setdefault(cache_name, []).append({
            "workload_name": workload_name,
            "step": step,
            "hit_rate": hit_rate,
            "hits": hits,
            "misses": misses,
            "memory_mb": memory_mb,
            "cpu_time_delta": cpu_time_delta,  # Windowed average CPU percent
            "seconds": timestamp,
            "size": size,
            "buckets": buckets,
            "evictions": evictions,
            "expirations": expirations
        })

    def _prepare(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.drop_duplicates(subset=['workload_name', 'step'], keep='last').copy()
        # Set custom workload order, then sort by workload_name and step
        df['workload_name'] = pd.Categorical(df['workload_name'], categories=WORKLOAD_ORDER, ordered=True)
        df = df.sort_values(['workload_name', 'step'], kind='stable')
        for col in NUMERIC_COLUMNS:
            df[col] = df[col].astype(np.float64)
        return df

    def export(self):
        """Append the logged records to an Excel file with one tab per cache.

        An existing file is cleared at this logger's first export; later exports
        append, with the newest row winning for a repeated (workload_name, step).
        Rows are sorted by workload_name and step.
        """
        if not self.records:
            return
        if not self._file_cleared and os.path.exists(self.filename):
            os.remove(self.filename)
        self._file_cleared = True

        if os.path.exists(self.filename):
            with pd.ExcelWriter(self.filename, engine='openpyxl', mode='a', if_sheet_exists='replace') as writer:
                for cache_name, records in self.records.items():
                    df_new = pd.DataFrame(records)
                    try:
                        df_existing = pd.read_excel(self.filename, sheet_name=cache_name)
                        df_combined = pd.concat([df_existing, df_new], ignore_index=True)
                    except ValueError:
                        df_combined = df_new
                    self._prepare(df_combined).to_excel(writer, sheet_name=cache_name, index=False,
                                                        float_format='%.15f')
        else:
            with pd.ExcelWriter(self.filename, engine='openpyxl') as writer:
                for cache_name, records in self.records.items():
                    self._prepare(pd.DataFrame(records)).to_excel(writer, sheet_name=cache_name, index=False,
                                                                  float_format='%.15f')
