"""
Task-sync subsystem.

Components:
- sync_models.py: data structures (Marker, SyncEntry, TaskStatus, TaskKind)
- sync_store.py: in-memory Sync Store + JSON persistence of the state record
- scanner.py: #TODO marker discovery and marker ids
- task_template.py: task note file names and contents
- engine.py: the five reconciliation operations
- scheduler.py: periodic runner for enabled operations
"""
