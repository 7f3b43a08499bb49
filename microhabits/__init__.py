"""Micro-habits: daily check-ins, streaks and XP levels for up to three habits"""

__version__ = "1.0.0"
