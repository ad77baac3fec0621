"""Utility functions."""

from .benchmark import Benchmarker, BenchmarkResults
from .plotting import Plotter
from .query_generator import QueryGenerator

__all__ = ['Benchmarker', 'BenchmarkResults', 'Plotter', 'QueryGenerator']
