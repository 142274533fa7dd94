"""
Server package for the chat relay server.

This package contains all server-side functionality including:
- Participant registry and naming
- One-to-one pairing between participants
- Per-connection protocol handling
- Configuration and utilities
"""
