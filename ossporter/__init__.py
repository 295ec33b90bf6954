"""Extract projects from internal Git repositories into public ones and keep them in sync."""

__version__ = "0.1.0"