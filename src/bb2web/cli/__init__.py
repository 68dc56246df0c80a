"""
bb2web Command-Line Interface
=============================

- **bb2web**: compile a BASIC source file to TypeScript or JavaScript

The tool is a Click-based CLI application with help text and error
reporting shared through bb2web.cli.errors.
"""

__all__ = ["bb2web"]
