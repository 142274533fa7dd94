"""
Pairing module.

This module implements the listen/paired state machine between participants
and the routing of chat lines that depends on it.

Every public method runs as a single critical section under the registry
lock. The private helpers assume the lock is already held, so a request that
tears down one pairing and establishes another is one flat transaction.
Nothing here awaits I/O while holding the lock; outgoing lines are only
queued on the target connection's handler.
"""

from enum import Enum

from relay_common.constants import LISTENER_SPECIFIER
from relay_common.protocol_definitions import (
    create_connected_message, create_already_connected_message,
    create_now_listening_message, create_already_listening_message,
    create_peer_absent_message, create_peer_busy_message,
    create_self_pairing_message, create_being_disconnected_message,
    create_peer_left_message, create_peer_renamed_message,
    create_echo_message, create_relayed_message
)
from relay_server.chat.participant import Participant
from relay_server.chat.registry import Registry
from relay_server.utils.logger import logger


class PairingOutcome(Enum):
    """Result of a connect-to-peer request."""
    ALREADY_PAIRED = 'already_paired'
    LISTENING = 'listening'
    ALREADY_LISTENING = 'already_listening'
    ABSENT = 'absent'
    ABSENT_DISCONNECTED = 'absent_disconnected'
    BUSY = 'busy'
    BUSY_DISCONNECTED = 'busy_disconnected'
    SELF = 'self'
    PAIRED = 'paired'


class PairingStateMachine:
    """Pairing transitions between participants."""

    def __init__(self, registry: Registry):
        self.registry = registry

    async def request_peer(self, requester: Participant, target_name: str) -> PairingOutcome:
        """Handle CONNECT TO PEER WITH NAME=<target_name> from the requester."""
        target_name = target_name.strip()

        async with self.registry.lock:
            current = requester.peer

            if current is not None and current.name == target_name:
                self._send(requester, create_already_connected_message(target_name))
                return PairingOutcome.ALREADY_PAIRED

            if target_name == LISTENER_SPECIFIER:
                if current is not None:
                    self._teardown_locked(requester)
                    self._send(requester, create_now_listening_message(current.name))
                    return PairingOutcome.LISTENING
                self._send(requester, create_already_listening_message())
                return PairingOutcome.ALREADY_LISTENING

            target = self.registry.lookup(target_name)

            if target is None:
                if current is not None:
                    self._send(requester, create_peer_absent_message(target_name, current.name))
                    self._teardown_locked(requester)
                    return PairingOutcome.ABSENT_DISCONNECTED
                self._send(requester, create_peer_absent_message(target_name))
                return PairingOutcome.ABSENT

            if target is requester:
                self._send(requester, create_self_pairing_message())
                return PairingOutcome.SELF

            if target.is_paired:
                if current is not None:
                    self._send(requester, create_peer_busy_message(target_name, target.peer.name, current.name))
                    self._teardown_locked(requester)
                    return PairingOutcome.BUSY_DISCONNECTED
                self._send(requester, create_peer_busy_message(target_name, target.peer.name))
                return PairingOutcome.BUSY

            if current is not None:
                self._send(requester, create_being_disconnected_message(current.name))
                self._teardown_locked(requester)

            self._pair_locked(requester, target)
            return PairingOutcome.PAIRED

    async def teardown(self, participant: Participant) -> bool:
        """Return the participant and its peer to listen mode. False if not paired."""
        async with self.registry.lock:
            if participant.is_listening:
                return False
            self._teardown_locked(participant)
            return True

    async def release(self, participant: Participant):
        """Tear down any pairing and remove the participant from the registry."""
        async with self.registry.lock:
            if participant.is_paired:
                self._teardown_locked(participant)
            self.registry.remove_locked(participant)

    async def rename(self, participant: Participant, new_name: str) -> bool:
        """
        Rename through the registry and tell the peer, if any.

        The pairing is kept. Raises the registry's errors unchanged.
        """
        async with self.registry.lock:
            old_name = participant.name
            changed = self.registry.rename_locked(participant, new_name)
            if changed:
                logger.log_rename(old_name, participant.name)
                if participant.peer is not None:
                    self._send(participant.peer, create_peer_renamed_message(participant.name))
            return changed

    async def peer_name(self, participant: Participant) -> str:
        """Get the peer's name, or the listener sentinel when not paired."""
        async with self.registry.lock:
            if participant.peer is None:
                return LISTENER_SPECIFIER
            return participant.peer.name

    async def route(self, sender: Participant, text: str) -> bool:
        """
        Route a chat line from the sender.

        Paired senders have the line relayed to the peer with their name in
        front; listening senders get it echoed back. Returns True if relayed.
        """
        async with self.registry.lock:
            if sender.peer is None:
                self._send(sender, create_echo_message(text))
                return False
            self._send(sender.peer, create_relayed_message(sender.name, text))
            return True

    def _pair_locked(self, requester: Participant, target: Participant):
        requester.peer = target
        target.peer = requester
        self._send(requester, create_connected_message(target.name))
        self._send(target, create_connected_message(requester.name))
        logger.log_pairing(requester.name, target.name)

    def _teardown_locked(self, requester: Participant):
        peer = requester.peer
        self._send(peer, create_peer_left_message(requester.name))
        peer.peer = None
        requester.peer = None
        logger.log_unpairing(requester.name, peer.name)

    def _send(self, participant: Participant, line: str):
        handler = self.registry.handler_for(participant)
        if handler is None:
            # Already removed; delivery is best effort
            logger.debug(f"Dropping line for unregistered participant '{participant.name}'")
            return
        handler.deliver(line)
