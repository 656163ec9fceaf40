# constants/scheduling.py

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 50

DEFAULT_WORKING_DAYS = [0, 1, 2, 3, 4]  # Mon-Fri
DEFAULT_START_TIME = "09:00"
DEFAULT_END_TIME = "17:00"
DEFAULT_SLOT_MINUTES = 30

# how many open slots a doctor card shows, and how far ahead we look for them
UPCOMING_SLOT_COUNT = 3
SLOT_HORIZON_DAYS = 7

LATE_CANCELLATION_HOURS = 24

SORT_OPTIONS = ("relevance", "recommended", "rating", "experience", "name", "availability")
AVAILABILITY_OPTIONS = ("today", "tomorrow")
