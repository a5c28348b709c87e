"""Loan, late-fee and ban policy parameters."""

from datetime import timedelta
from decimal import Decimal

LOAN_DURATION_DAYS = 14  # days from borrow to due date
LATE_FEE_PER_DAY = Decimal("5")  # per started day past due, uncapped
BAN_MULTIPLIER = 2  # ban days per late day, applied at return
MAX_ACTIVE_LOANS = 1  # concurrent unreturned loans per user
REMINDER_DAY = 13  # 1-based day of the reminder; sent by the backend

ONE_DAY = timedelta(days=1)
LOAN_DURATION = timedelta(days=LOAN_DURATION_DAYS)

POPULAR_BOOKS_DEFAULT_LIMIT = 6
POPULAR_BOOKS_DEFAULT_DAYS = 30

PASSWORD_MIN_LENGTH = 6
MESSAGE_MIN_LENGTH = 10

BOOK_CATEGORIES = (
    "Novel",
    "Science",
    "History",
    "Philosophy",
    "Literature",
    "Biography",
    "Children",
    "Poetry",
    "Fantasy",
    "Mystery",
    "Horror",
    "Travel",
    "Psychology",
    "Art",
    "Young Adult",
    "Technology",
    "Religion",
    "Self-Development",
    "Business & Economics",
    "Classic",
    "Other",
)
