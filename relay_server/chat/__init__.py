"""
Chat module for server-side relay functionality.

Handles:
- Participant records
- Name registry
- Peer pairing and chat routing
- Connection handling
"""
