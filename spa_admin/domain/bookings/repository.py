"""Booking repository - Firestore queries for bookings"""

from datetime import date, timedelta
from typing import Optional

from ...accessor import CollectionAccessor
from ...pagination import ListQuery


def week_bounds(day: date) -> tuple[date, date]:
    """Sunday-started week containing `day`"""
    start = day - timedelta(days=(day.weekday() + 1) % 7)
    return start, start + timedelta(days=6)


class BookingRepository(CollectionAccessor):
    """Repository for booking documents"""

    collection_name = "bookings"

    @staticmethod
    def tab_query(tab: str, today: date, status: Optional[str] = None) -> ListQuery:
        """
        Upcoming: date >= today, soonest first.
        History: date < today, most recent first.
        """
        if tab == "history":
            filters = [("date", "<", today.isoformat())]
            descending = True
        else:
            filters = [("date", ">=", today.isoformat())]
            descending = False

        if status:
            filters.append(("status", "==", status))

        return ListQuery("bookings", "date", descending=descending, filters=tuple(filters))

    @staticmethod
    def week_query(day: date) -> ListQuery:
        start, end = week_bounds(day)
        return ListQuery(
            "bookings",
            "date",
            filters=(("date", ">=", start.isoformat()), ("date", "<=", end.isoformat())),
        )

    @staticmethod
    def day_query(day: date) -> ListQuery:
        return ListQuery("bookings", "date", filters=(("date", "==", day.isoformat()),))
