"""Hunter progression engine: experience, levels, ranks, streaks, daily wins and missions"""

__version__ = "0.1.0"
