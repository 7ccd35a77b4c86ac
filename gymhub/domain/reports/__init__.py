"""Dashboard reports"""

from .router import router

__all__ = ["router"]
