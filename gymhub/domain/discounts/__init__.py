"""Discount codes and pricing"""

from .router import router

__all__ = ["router"]
