"""Membership subscription lifecycle"""

from .router import router

__all__ = ["router"]
