"""ResQLink incident reporting backend."""

__version__ = "2.0.0"
