"""Pyrocks - command dispatch layer of a Lua rocks package manager.

Parses the command line, resolves the active installation tree and runtime
configuration, verifies filesystem permissions and routes control to the
registered command handlers.
"""
