"""Domain objects: parsers, documents and vault clients."""
