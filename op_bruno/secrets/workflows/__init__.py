"""Multi-step workflows built on the domain layer."""
