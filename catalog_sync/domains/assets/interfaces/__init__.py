from .storage import IObjectStorage

__all__ = ["IObjectStorage"]
