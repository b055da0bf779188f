"""Authentication layer: database bootstrap and login strategies."""

__version__ = "0.1.0"
