from . import exploration, io, processing

__all__ = ["io", "processing", "exploration"]
