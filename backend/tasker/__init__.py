"""Tasker - hierarchical task lists with AI-assisted breakdown."""

__version__ = "0.1.0"
