"""Gym members"""

from .router import router

__all__ = ["router"]
