"""
Server configuration module.

This module handles server-side configuration settings.
"""

from typing import Optional

from relay_common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT, READ_LIMIT


class ServerConfig:
    """Server configuration class."""
    
    def __init__(self, host: str = DEFAULT_SERVER_HOST, port: int = DEFAULT_PORT,
                 log_file: Optional[str] = None):
        self.host = host
        self.port = port
        
        # Operational log file (console only when None)
        self.log_file = log_file
        
        # Longest line a client may send before the connection is dropped
        self.read_limit = READ_LIMIT
