"""
Task list package.

Domain core (tasks, visible set, pagination) plus a FastAPI surface in
tasklist.main.
"""

__version__ = "0.1.0"
