# ========================
# geoload/utils/performance_monitor.py
# ========================

"""
Performance Monitoring Utilities

Tracks elapsed wall-clock time, throughput and memory for an ingestion run.
"""

import logging
import os
import time
from contextlib import contextmanager
from typing import Any, Dict, Optional

import psutil

logger = logging.getLogger(__name__)


class PerformanceMonitor:
    """
    Performance monitoring utility for the ingestion pipeline.
    Tracks elapsed time with microsecond resolution, throughput and peak memory.
    """

    def __init__(self, name: str = "Ingestion", log_interval: int = 100):
        """
        Initialize performance monitor.

        Args:
            name (str): Name for this monitoring session
            log_interval (int): Log progress every this many chunks
        """
        self.name = name
        self.log_interval = log_interval
        self.start_ns: Optional[int] = None
        self.end_ns: Optional[int] = None
        self.peak_memory_mb = 0.0
        self.records_processed = 0
        self.chunks_processed = 0
        self._process = psutil.Process(os.getpid())

        logger.debug(f"PerformanceMonitor initialized: {name}")

    def start_monitoring(self) -> None:
        """Start performance monitoring."""
        self.start_ns = time.perf_counter_ns()
        self.end_ns = None
        self.peak_memory_mb = self._get_memory_usage_mb()

        logger.info(f"{self.name} - Performance monitoring started")
        logger.debug(f"Initial memory usage: {self.peak_memory_mb:.2f} MB")

    def update_progress(self, records_in_chunk: int) -> None:
        """
        Update progress tracking.

        Args:
            records_in_chunk (int): Number of records processed in this chunk
        """
        self.records_processed += records_in_chunk
        self.chunks_processed += 1
        current_memory = self._get_memory_usage_mb()
        self.peak_memory_mb = max(self.peak_memory_mb, current_memory)

        if self.log_interval and self.chunks_processed % self.log_interval == 0:
            self._log_progress(current_memory)

    @property
    def elapsed_microseconds(self) -> int:
        """Elapsed time so far, or total time once monitoring stopped."""
        if self.start_ns is None:
            return 0
        end_ns = self.end_ns if self.end_ns is not None else time.perf_counter_ns()
        return (end_ns - self.start_ns) // 1000

    def _log_progress(self, current_memory: float) -> None:
        elapsed = self.elapsed_microseconds / 1_000_000
        throughput = self.records_processed / elapsed if elapsed > 0 else 0

        logger.info(
            f"{self.name} - Progress: {self.chunks_processed} chunks, "
            f"{self.records_processed:,} records, "
            f"{throughput:.0f} records/sec, "
            f"Memory: {current_memory:.2f} MB"
        )

    def stop_monitoring(self) -> Dict[str, Any]:
        """
        Stop monitoring and return performance summary.

        Returns:
            dict: Performance statistics
        """
        self.end_ns = time.perf_counter_ns()
        elapsed_us = self.elapsed_microseconds
        total_seconds = elapsed_us / 1_000_000
        throughput = self.records_processed / total_seconds if total_seconds > 0 else 0

        summary = {
            'name': self.name,
            'elapsed_microseconds': elapsed_us,
            'records_processed': self.records_processed,
            'chunks_processed': self.chunks_processed,
            'average_throughput_records_per_second': throughput,
            'peak_memory_usage_mb': self.peak_memory_mb,
        }

        logger.info(
            f"{self.name} - Finished in {total_seconds:.3f}s: "
            f"{self.records_processed:,} records in {self.chunks_processed:,} chunks, "
            f"{throughput:.0f} records/sec, peak memory {self.peak_memory_mb:.2f} MB"
        )
        return summary

    def _get_memory_usage_mb(self) -> float:
        """Get current resident memory usage in MB."""
        try:
            return self._process.memory_info().rss / (1024 * 1024)
        except psutil.Error as e:
            logger.debug(f"Could not get memory usage: {e}")
            return self.peak_memory_mb


@contextmanager
def monitor_performance(name: str = "Ingestion", log_interval: int = 100):
    """
    Context manager for easy performance monitoring.

    Args:
        name (str): Name for this monitoring session
        log_interval (int): Log progress every this many chunks

    Yields:
        PerformanceMonitor: Monitor instance, stopped on exit
    """
    monitor = PerformanceMonitor(name, log_interval=log_interval)
    monitor.start_monitoring()
    try:
        yield monitor
    finally:
        monitor.stop_monitoring()
