"""
Task subsystem.

Components:
- task_models.py: data structures (Task, SubTask, Category, ProgressTracker, ...)
- progress.py: derived completion / progress percentages
- task_store.py: in-memory store with write-through persistence
- date_matcher.py: calendar placement of tasks
- export.py: CSV export
- validation.py: caller-side input checks
- sample_data.py: bundled demo categories and tasks
"""
