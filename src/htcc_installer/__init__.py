"""Installer tooling for Hand Tracked Cockpit Clicking (HTCC)."""

__version__ = "1.0.0"
