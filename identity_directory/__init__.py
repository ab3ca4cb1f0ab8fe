"""Identity provider and directory service clients."""
__version__ = "0.1.0"
