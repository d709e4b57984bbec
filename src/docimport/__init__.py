"""docimport - import parsed source documentation into a content store."""

__version__ = "0.1.0"
