"""autoboot: conditional module activation and startup lifecycle broadcast."""

__version__ = "0.1.0"
