"""boardflow: kanban board with task automation rules and fractional card ordering."""

__version__ = "0.1.0"
