"""Secret extraction and vault synchronisation for Bruno collections."""
