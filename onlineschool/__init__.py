"""
OnlineSchool tutoring client.

Lesson status workflow and homework grading against the OnlineSchool
REST backend.
"""

__version__ = "0.1.0"
