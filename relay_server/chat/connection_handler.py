"""
Connection handler module.

One ConnectionHandler runs per accepted client. It reads lines in order,
dispatches control messages, and routes chat through the pairing state
machine. All output for the client, including lines produced by other
connections, goes through its outbound queue and a single writer task.
"""

import asyncio
import socket
from enum import Enum
from typing import Optional

from relay_common.constants import ControlCommands
from relay_common.protocol_definitions import (
    create_welcome_message, create_default_name_message, create_goodbye_message,
    create_name_set_message, create_name_unchanged_message, create_name_reserved_message,
    create_name_blank_message, create_name_in_use_message, create_my_name_message,
    create_peer_name_message, create_client_list_message, create_invalid_control_message
)
from relay_common.wire import read_line, write_line, is_control_message, parse_control_message
from relay_server.chat.participant import Participant
from relay_server.chat.pairing import PairingStateMachine
from relay_server.chat.registry import (
    Registry, NameInUseError, ReservedNameError, BlankNameError
)
from relay_server.utils.logger import logger


class ConnectionState(Enum):
    CONNECTING = 'connecting'
    ACTIVE = 'active'
    CLOSING = 'closing'
    CLOSED = 'closed'


class ConnectionHandler:
    """Protocol handling for a single client connection."""

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter,
                 registry: Registry, pairing: PairingStateMachine,
                 server_port: int = 0):
        self.reader = reader
        self.writer = writer
        self.registry = registry
        self.pairing = pairing
        self.server_port = server_port

        peername = writer.get_extra_info('peername')
        self.address = f"{peername[0]}:{peername[1]}" if peername else 'unknown'

        self.participant = Participant(address=self.address)
        self.state = ConnectionState.CONNECTING
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.writer_task: Optional[asyncio.Task] = None
        self.cancelled = False

    def deliver(self, line: str):
        """Queue a line for this client. Safe to call from any connection's task."""
        if self.state is ConnectionState.CLOSED:
            return
        self.outbox.put_nowait(line)

    async def run(self):
        """Serve the connection until the client leaves or the transport fails."""
        self.writer_task = asyncio.create_task(self._write_loop())
        try:
            await self._activate()
            while self.state is ConnectionState.ACTIVE:
                line = await read_line(self.reader)
                if line is None:
                    break

                logger.log_received(self.address, self.participant.name, line)

                if is_control_message(line):
                    await self.handle_control_message(line)
                else:
                    await self.pairing.route(self.participant, line)
        except asyncio.CancelledError:
            logger.info(f"Connection cancelled for {self.address}({self.participant.name})")
            self.cancelled = True
            raise
        except Exception as e:
            logger.log_error(f"connection {self.address}", e)
        finally:
            await self._close()

    async def _activate(self):
        name = await self.registry.register_default(self.participant, self)
        self.state = ConnectionState.ACTIVE
        logger.log_connection(self.address, name)

        sockname = self.writer.get_extra_info('sockname')
        ip_addr = sockname[0] if sockname else '0.0.0.0'
        port = sockname[1] if sockname else self.server_port
        self.deliver(create_welcome_message(ip_addr, socket.gethostname(), port))
        self.deliver(create_default_name_message(name))

    async def handle_control_message(self, line: str):
        """Dispatch one control line."""
        command, argument = parse_control_message(line)

        if command == ControlCommands.DISCONNECT_FROM_SERVER:
            self.deliver(create_goodbye_message(self.participant.name))
            self.state = ConnectionState.CLOSING
        elif command == ControlCommands.SET_USERNAME:
            await self.handle_set_name(argument)
        elif command == ControlCommands.SET_PEER_NAME:
            await self.pairing.request_peer(self.participant, argument)
        elif command == ControlCommands.GET_LIST_OF_CONNECTED_CLIENTS:
            self.deliver(create_client_list_message(self.registry.names()))
        elif command == ControlCommands.GET_MY_NAME:
            self.deliver(create_my_name_message(self.participant.name))
        elif command == ControlCommands.GET_MY_PEERS_NAME:
            peer_name = await self.pairing.peer_name(self.participant)
            self.deliver(create_peer_name_message(peer_name))
        else:
            logger.warning(f"Invalid control message from {self.address}: {line}")
            self.deliver(create_invalid_control_message(line))

    async def handle_set_name(self, new_name: str):
        """Process SET MY NAME=<name>."""
        new_name = new_name.strip()
        try:
            changed = await self.pairing.rename(self.participant, new_name)
        except ReservedNameError:
            self.deliver(create_name_reserved_message(new_name))
        except BlankNameError:
            self.deliver(create_name_blank_message())
        except NameInUseError:
            self.deliver(create_name_in_use_message(new_name))
        else:
            if changed:
                self.deliver(create_name_set_message(new_name))
            else:
                self.deliver(create_name_unchanged_message(new_name))

    async def _write_loop(self):
        """Drain the outbound queue to the transport, one flushed line at a time."""
        while True:
            line = await self.outbox.get()
            if line is None:
                return
            try:
                await write_line(self.writer, line)
            except (ConnectionError, OSError) as e:
                logger.log_error(f"write to {self.address}", e)
                # Unblock the reader so the handler moves to closing
                self.state = ConnectionState.CLOSING
                self.writer.close()
                return

    async def _close(self):
        if self.state is ConnectionState.CLOSED:
            return
        self.state = ConnectionState.CLOSING

        # Tell the peer and drop out of the registry in one step
        await self.pairing.release(self.participant)

        if self.writer_task is not None:
            if self.cancelled:
                # Server shutdown: a client that stopped reading must not stall it
                self.writer_task.cancel()
            else:
                # Flush anything already queued (e.g. the goodbye line)
                self.outbox.put_nowait(None)
            result, = await asyncio.gather(self.writer_task, return_exceptions=True)
            if isinstance(result, Exception):
                logger.log_error(f"flush to {self.address}", result)

        self.state = ConnectionState.CLOSED
        try:
            if self.cancelled:
                self.writer.transport.abort()
            else:
                self.writer.close()
            await self.writer.wait_closed()
        except (ConnectionError, OSError) as e:
            logger.debug(f"Error closing transport for {self.address}: {e}")

        logger.log_disconnect(self.address, self.participant.name)
