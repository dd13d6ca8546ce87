"""Centralized constants for cardledger.

Scheduling defaults, classification boundaries and record limits live here
so every layer imports from a single source of truth.
"""

# ---------- SM-2 scheduling ----------
DEFAULT_EASINESS = 2.5
MIN_EASINESS = 1.3
MAX_EASINESS = 3.0
FIRST_INTERVAL = 1  # days
SECOND_INTERVAL = 6  # days
MIN_INTERVAL = 1
PASSING_QUALITY = 3
MAX_QUALITY = 4

# ---------- Difficulty buckets (closed upper bounds, in days) ----------
NEW_MAX_INTERVAL = 1
LEARNING_MAX_INTERVAL = 7
YOUNG_MAX_INTERVAL = 30

# ---------- Card priority ----------
OVERDUE_DAY_WEIGHT = 10
DUE_TODAY_BONUS = 5
NEW_CARD_BONUS = 3
LEARNING_CARD_BONUS = 2

# ---------- Session sizing ----------
SMALL_SESSION_MAX = 10
MEDIUM_SESSION_SIZE = 25
LARGE_SESSION_SIZE = 50
MAX_SESSION_SIZE = 100
LARGE_BACKLOG_RATIO = 0.3

# ---------- History / windows ----------
SESSION_HISTORY_LIMIT = 100
STREAK_WINDOW_DAYS = 30
PROGRESS_WINDOW_DAYS = 7
WEEKLY_PROGRESS_WEEKS = 4
RECENT_SESSIONS = 10

# ---------- Record limits ----------
MAX_ID_LEN = 100
MAX_FRONT_LEN = 1000
MAX_BACK_LEN = 2000
MAX_TAGS = 20
MAX_TAG_LEN = 50
MAX_AVERAGE_DIFFICULTY = 4.0

# ---------- Statistics ----------
EASINESS_DIGITS = 2
ACCURACY_DIGITS = 1
