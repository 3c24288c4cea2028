"""tessera: declarative widget types for content management."""

__version__ = "0.1.0"
