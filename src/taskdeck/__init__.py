# src/taskdeck/__init__.py

"""Personal task tracker: categories, sub-tasks, progress steps and a calendar view."""

__version__ = "0.1.0"
