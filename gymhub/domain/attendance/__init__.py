"""Attendance and entitlement"""

from .router import router

__all__ = ["router"]
