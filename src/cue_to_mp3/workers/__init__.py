"""Conversion workers and job scheduling"""

from .processor import convert, run_jobs, effective_parallelism

__all__ = ["convert", "run_jobs", "effective_parallelism"]
