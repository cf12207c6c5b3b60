"""
Application constants for the catalog sync service
"""

from . import app, shopify
from .app import *
from .shopify import *

__all__ = app.__all__ + shopify.__all__
