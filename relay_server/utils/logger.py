"""
Server logging module.

This module handles server-side logging functionality.
"""

import logging
from typing import Optional

from relay_common.constants import LOGGER_NAME, LOG_FORMAT, LOG_DATE_FORMAT, SERVER_LOG_LABEL


class ServerLogger:
    """Server logging class."""

    def __init__(self, log_level: int = logging.INFO):
        self.logger = logging.getLogger(LOGGER_NAME)
        self.configure(log_level)

    def configure(self, log_level: int = logging.INFO, log_file: Optional[str] = None):
        """Reset handlers: console always, plus a file when log_file is given."""
        self.logger.setLevel(log_level)

        # Remove existing handlers
        for handler in self.logger.handlers[:]:
            self.logger.removeHandler(handler)
            handler.close()

        formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(log_level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding='utf-8')
            file_handler.setLevel(log_level)
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

    def info(self, message: str):
        """Log info message."""
        self.logger.info(message)

    def error(self, message: str):
        """Log error message."""
        self.logger.error(message)

    def warning(self, message: str):
        """Log warning message."""
        self.logger.warning(message)

    def debug(self, message: str):
        """Log debug message."""
        self.logger.debug(message)

    def log_server_started(self, ip_addr: str, port: int, hostname: str):
        """Log server startup."""
        self.info(f"Server started; IP Address: {ip_addr}; Port: {port}; Hostname: {hostname}")

    def log_connection(self, addr: str, name: str):
        """Log client connection."""
        self.info(f"{SERVER_LOG_LABEL}: New client connected from {addr}, assigned name={name}")

    def log_received(self, addr: str, name: str, line: str):
        """Log a line received from a client, before it is processed."""
        self.info(f"{SERVER_LOG_LABEL}: {addr}({name}): {line}")

    def log_rename(self, old_name: str, new_name: str):
        """Log a successful rename."""
        self.info(f"{SERVER_LOG_LABEL}: '{old_name}' is now known as '{new_name}'")

    def log_pairing(self, first: str, second: str):
        """Log two participants being paired."""
        self.info(f"{SERVER_LOG_LABEL}: '{first}' and '{second}' are now chatting")

    def log_unpairing(self, requester: str, peer: str):
        """Log a pairing teardown."""
        self.info(f"{SERVER_LOG_LABEL}: '{requester}' left the chat with '{peer}'")

    def log_disconnect(self, addr: str, name: str):
        """Log client disconnect."""
        self.info(f"{SERVER_LOG_LABEL}: {addr}({name}) has left")

    def log_error(self, operation: str, error: Exception):
        """Log error with operation context."""
        self.error(f"Error in {operation}: {error}")


# Global logger instance
logger = ServerLogger()
