"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskEdit, TaskFilter, Notification)
- lifecycle.py: pure state transitions (start / complete / reactivate / toggle / edit)
- projection.py: filter projection + counts
- task_store.py: in-memory task list synced to the key-value store
- reminder_scanner.py: polling loop that fires reminder and deadline alerts once
- task_api.py: small high-level helpers used by the console layer
"""
