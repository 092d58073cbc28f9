"""
Task subsystem.

Components:
- task_models.py: value types (Task, Status, Priority, ChecklistItem, Tag)
- automation.py: progress -> status rules and the QA completion gate
- ordering.py: fractional positions for manual ordering inside a column
"""
