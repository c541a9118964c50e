"""taskdeps: dependency graph engine for hierarchical task lists."""

__version__ = "0.4.0"
