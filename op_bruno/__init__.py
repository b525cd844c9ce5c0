"""op-bruno: move Bruno environment secrets into 1Password."""

__version__ = "0.1.0"
