"""Problem Bank - extract, relate and cluster validated innovation problems."""

__version__ = "0.1.0"
