"""Command line interface for op-bruno."""
