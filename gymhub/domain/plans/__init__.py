"""Membership plan catalog"""

from .router import router

__all__ = ["router"]
