"""Calendar storage backends."""

from .caldav_client import CalDavCalendar

__all__ = ["CalDavCalendar"]
