"""Group classes and bookings"""

from .router import router

__all__ = ["router"]
