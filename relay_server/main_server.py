#!/usr/bin/env python3
"""
Chat Relay Server - Main Entry Point

This is the main entry point for the server application.
It accepts client connections and runs one ConnectionHandler per client,
all sharing a single Registry and PairingStateMachine.
"""

import argparse
import asyncio
import logging
import socket
import sys
from typing import Optional, Set

from relay_common.constants import DEFAULT_SERVER_HOST, DEFAULT_PORT
from relay_server.chat.connection_handler import ConnectionHandler
from relay_server.chat.pairing import PairingStateMachine
from relay_server.chat.registry import Registry
from relay_server.utils.config import ServerConfig
from relay_server.utils.logger import logger


class RelayServer:
    """Main server class: accept loop plus the shared relay state."""

    def __init__(self, config: Optional[ServerConfig] = None):
        self.config = config or ServerConfig()
        self.registry = Registry()
        self.pairing = PairingStateMachine(self.registry)
        self.server: Optional[asyncio.AbstractServer] = None
        self.handler_tasks: Set[asyncio.Task] = set()

    @property
    def port(self) -> int:
        """Port actually bound (differs from config.port when it was 0)."""
        if self.server and self.server.sockets:
            return self.server.sockets[0].getsockname()[1]
        return self.config.port

    async def handle_client(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter):
        """Handle individual client connection."""
        handler = ConnectionHandler(reader, writer, self.registry, self.pairing, self.port)

        task = asyncio.current_task()
        self.handler_tasks.add(task)
        try:
            await handler.run()
        finally:
            self.handler_tasks.discard(task)

    async def start(self):
        """Bind the listening socket. Raises OSError if the port can't be bound."""
        self.server = await asyncio.start_server(
            self.handle_client,
            self.config.host,
            self.config.port,
            limit=self.config.read_limit
        )

        hostname = socket.gethostname()
        try:
            ip_addr = socket.gethostbyname(hostname)
        except OSError:
            ip_addr = self.config.host
        logger.log_server_started(ip_addr, self.port, hostname)
        return self.server

    async def serve_forever(self):
        """Start (if needed) and accept connections until cancelled."""
        if self.server is None:
            await self.start()
        async with self.server:
            await self.server.serve_forever()

    async def stop(self):
        """Stop accepting and close every live connection."""
        if self.server is not None:
            self.server.close()

        # Handlers close their own transports; wait_closed() waits on them
        tasks = list(self.handler_tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

        if self.server is not None:
            await self.server.wait_closed()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Chat Relay Server')
    parser.add_argument('--port', '-port', '-p', type=int, default=DEFAULT_PORT,
                       help=f'TCP port to listen on (default: {DEFAULT_PORT})')
    parser.add_argument('--host', type=str, default=DEFAULT_SERVER_HOST,
                       help=f'Host to bind to (default: {DEFAULT_SERVER_HOST})')
    parser.add_argument('--log-level', type=str, default='INFO',
                       choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                       help='Logging level (default: INFO)')
    parser.add_argument('--log-file', type=str, default=None,
                       help='Also write the operational log to this file')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    config = ServerConfig(host=args.host, port=args.port, log_file=args.log_file)
    logger.configure(getattr(logging, args.log_level), config.log_file)

    server = RelayServer(config)

    async def run() -> bool:
        try:
            await server.start()
        except OSError as e:
            logger.error(f"Unable to listen on {config.host}:{config.port}: {e}. "
                         f"Try a different port number.")
            return False
        await server.serve_forever()
        return True

    try:
        if not asyncio.run(run()):
            sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Server shutting down...")


if __name__ == "__main__":
    main()
