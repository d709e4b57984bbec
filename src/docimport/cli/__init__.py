"""docimport command line interface."""
