"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

# The document store caps "IN" filters at 30 values.
IN_QUERY_BATCH_SIZE = 30

# date.weekday(): Saturday=5, Sunday=6
WEEKEND_DAYS = (5, 6)

# Advances given up to this day of the following month count against a salary month.
ADVANCE_WINDOW_NEXT_MONTH_DAY = 15

MIN_HOLIDAY_NAME_LENGTH = 2

# Register cell toggling order.
STATUS_CYCLE = ("Present", "Absent", "Leave", "Half-day")

TOPIC_HOLIDAYS = "holidays"
TOPIC_ATTENDANCE = "attendance"
TOPIC_ADVANCES = "advances"
TOPIC_PAYMENTS = "payments"
TOPIC_STAFF = "staff"
