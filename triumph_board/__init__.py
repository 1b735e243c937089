"""Triumph Board data layer: quick links, goals, tasks, snippets and widgets."""

__version__ = "0.1.0"
