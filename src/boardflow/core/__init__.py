"""
Board core.

Components:
- access.py: roles, permissions, users, projects
- board.py: BoardService (operations used by connectors)
- metrics.py / views.py: read-only projections for the dashboard and views
- ports.py: Protocols for persistence and notifications
"""
