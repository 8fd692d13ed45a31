# src/taskdeck/core/__init__.py
