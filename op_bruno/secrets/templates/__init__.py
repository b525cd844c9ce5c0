"""Script templates injected into Bruno collections."""
