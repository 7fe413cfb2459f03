"""Labeled example loading."""

from .dataset import Dataset, load_csv

__all__ = ['Dataset', 'load_csv']
