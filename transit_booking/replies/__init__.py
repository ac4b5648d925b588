from transit_booking.replies.formatter import (
    BookingLine,
    DepartureRow,
    ReplyFormatter,
    ReviewDetails,
)

__all__ = ["BookingLine", "DepartureRow", "ReplyFormatter", "ReviewDetails"]
