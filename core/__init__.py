from .settings import Settings, settings

__version__ = "0.1.0"

__all__ = ["Settings", "settings", "__version__"]
