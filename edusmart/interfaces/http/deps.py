from datetime import datetime


def get_clock():
    """Time source for date-sensitive rules; tests override it."""
    return datetime.now
