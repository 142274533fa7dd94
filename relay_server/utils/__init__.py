"""
Utilities for the relay server: configuration and logging.
"""
