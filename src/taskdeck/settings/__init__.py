# src/taskdeck/settings/__init__.py
