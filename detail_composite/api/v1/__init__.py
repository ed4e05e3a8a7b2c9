"""
API v1 routers.
"""

from detail_composite.api.v1 import composite, health

__all__ = ["composite", "health"]
