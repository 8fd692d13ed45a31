# src/taskdeck/connectors/__init__.py
