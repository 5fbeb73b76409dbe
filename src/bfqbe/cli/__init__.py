"""
bfqbe Command-Line Interface
============================

- **bfc**: compiles a program to QBE IL

The tool is a Click application; exit codes are shared through
``bfqbe.cli.errors.ExitCode``.
"""

__all__ = ["bfc"]
