"""
Task subsystem.

Components:
- task_models.py: data structures (Task, TaskDraft, TaskTemplate, Priority)
- task_codec.py: wire format + schema-validating decode
- task_store.py: in-memory task list, selection, drag pointer, write-through persistence
- task_filters.py: view-list filtering/sorting and category derivation
- task_notifications.py: overdue dedup policy and user-action announcements
- task_scheduler.py: periodic overdue check (async loop + background runner)
- task_templates.py, task_analytics.py, task_export.py, task_timer.py: supporting features
- task_api.py: small high-level helpers used by the console commands
"""
