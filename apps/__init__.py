"""Node application shells.

This package contains thin entry points built on nodekit:
- node: the default ``beacond`` node binary
"""
