"""Core Business Components.

This package contains independent business modules:
- workspace: per-user workspace directories and file access
- indexer: markdown index over workspace folders
- assistant: Claude Code integration for workspace chat
"""
