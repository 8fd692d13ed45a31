"""
Durable storage.

Components:
- json_storage.py: file-backed key-value storage + snapshot partitions
- writer.py: background write-through with retry/backoff
"""
