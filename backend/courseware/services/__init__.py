"""Services that write to the courseware data layer."""
from .points import PointService

__all__ = ["PointService"]
