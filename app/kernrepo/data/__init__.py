"""Bundled data files (theme, sample kernels list)."""
