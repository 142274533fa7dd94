#!/usr/bin/env python3
"""
Unit tests for relay_server.chat.pairing

Tests every branch of the connect-to-peer state machine, checking after each
transition that pairing stays symmetric, plus teardown, release, rename
notices and chat routing.
"""

import unittest

import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent))

from relay_server.chat.participant import Participant
from relay_server.chat.pairing import PairingStateMachine, PairingOutcome
from relay_server.chat.registry import Registry, NameInUseError
from tests.helpers import RecordingHandler


class TestPairing(unittest.IsolatedAsyncioTestCase):
    """Test cases for PairingStateMachine."""

    async def asyncSetUp(self):
        """Register four named participants, all listening."""
        self.registry = Registry()
        self.pairing = PairingStateMachine(self.registry)
        self.handlers = {}
        self.people = {}
        for name in ("Alice", "Bob", "Carol", "Dave"):
            participant = Participant(address=f"10.0.0.1:{len(self.people)}")
            handler = RecordingHandler()
            await self.registry.register_default(participant, handler)
            await self.registry.rename(participant, name)
            self.people[name] = participant
            self.handlers[name] = handler

    def assert_symmetric(self):
        for participant in self.people.values():
            if participant.peer is not None:
                self.assertIs(participant.peer.peer, participant)
                self.assertIsNot(participant.peer, participant)
            self.assertEqual(participant.is_listening, participant.peer is None)

    def clear_lines(self):
        for handler in self.handlers.values():
            handler.clear()

    async def pair(self, first: str, second: str):
        outcome = await self.pairing.request_peer(self.people[first], second)
        self.assertEqual(outcome, PairingOutcome.PAIRED)
        self.clear_lines()

    async def test_both_listening_pair_directly(self):
        alice, bob = self.people["Alice"], self.people["Bob"]

        outcome = await self.pairing.request_peer(alice, "Bob")

        self.assertEqual(outcome, PairingOutcome.PAIRED)
        self.assertIs(alice.peer, bob)
        self.assertIs(bob.peer, alice)
        self.assertFalse(alice.is_listening)
        self.assertFalse(bob.is_listening)
        self.assertEqual(self.handlers["Alice"].lines, ['SVR: You are now connected with "Bob"'])
        self.assertEqual(self.handlers["Bob"].lines, ['SVR: You are now connected with "Alice"'])
        self.assert_symmetric()

    async def test_target_name_is_trimmed(self):
        outcome = await self.pairing.request_peer(self.people["Alice"], "  Bob ")

        self.assertEqual(outcome, PairingOutcome.PAIRED)
        self.assert_symmetric()

    async def test_already_paired_with_target(self):
        await self.pair("Alice", "Bob")

        outcome = await self.pairing.request_peer(self.people["Alice"], "Bob")

        self.assertEqual(outcome, PairingOutcome.ALREADY_PAIRED)
        self.assertIs(self.people["Alice"].peer, self.people["Bob"])
        self.assertIn("already chatting", self.handlers["Alice"].last())
        self.assertEqual(self.handlers["Bob"].lines, [])
        self.assert_symmetric()

    async def test_listener_while_paired_tears_down(self):
        await self.pair("Alice", "Bob")

        outcome = await self.pairing.request_peer(self.people["Alice"], "Listener")

        self.assertEqual(outcome, PairingOutcome.LISTENING)
        self.assertIsNone(self.people["Alice"].peer)
        self.assertIsNone(self.people["Bob"].peer)
        self.assertTrue(self.people["Bob"].is_listening)
        self.assertEqual(self.handlers["Bob"].lines,
                         ['SVR: User "Alice" has exited the chat. You are now in listen mode.'])
        self.assertIn("listen mode", self.handlers["Alice"].last())
        self.assert_symmetric()

    async def test_listener_while_listening(self):
        outcome = await self.pairing.request_peer(self.people["Alice"], "Listener")

        self.assertEqual(outcome, PairingOutcome.ALREADY_LISTENING)
        self.assertEqual(self.handlers["Alice"].lines, ["SVR: You are now in listen mode."])
        self.assert_symmetric()

    async def test_absent_target_while_listening(self):
        outcome = await self.pairing.request_peer(self.people["Alice"], "Zed")

        self.assertEqual(outcome, PairingOutcome.ABSENT)
        self.assertTrue(self.people["Alice"].is_listening)
        self.assertIn('"Zed" is not connected', self.handlers["Alice"].last())
        self.assertNotIn("disconnected", self.handlers["Alice"].last())
        self.assert_symmetric()

    async def test_absent_target_while_paired_disconnects(self):
        await self.pair("Alice", "Bob")

        outcome = await self.pairing.request_peer(self.people["Alice"], "Zed")

        self.assertEqual(outcome, PairingOutcome.ABSENT_DISCONNECTED)
        self.assertTrue(self.people["Alice"].is_listening)
        self.assertTrue(self.people["Bob"].is_listening)
        self.assertIn('"Zed" is not connected', self.handlers["Alice"].last())
        self.assertIn('disconnected from "Bob"', self.handlers["Alice"].last())
        self.assertIn("has exited the chat", self.handlers["Bob"].last())
        self.assert_symmetric()

    async def test_busy_target_while_listening(self):
        await self.pair("Bob", "Carol")

        outcome = await self.pairing.request_peer(self.people["Alice"], "Bob")

        self.assertEqual(outcome, PairingOutcome.BUSY)
        self.assertTrue(self.people["Alice"].is_listening)
        self.assertIs(self.people["Bob"].peer, self.people["Carol"])
        self.assertIn('"Bob" is chatting with the user "Carol"', self.handlers["Alice"].last())
        self.assertEqual(self.handlers["Bob"].lines, [])
        self.assert_symmetric()

    async def test_busy_target_while_paired_disconnects(self):
        await self.pair("Alice", "Dave")
        await self.pair("Bob", "Carol")

        outcome = await self.pairing.request_peer(self.people["Alice"], "Bob")

        self.assertEqual(outcome, PairingOutcome.BUSY_DISCONNECTED)
        self.assertTrue(self.people["Alice"].is_listening)
        self.assertTrue(self.people["Dave"].is_listening)
        self.assertIs(self.people["Bob"].peer, self.people["Carol"])
        self.assertIn('disconnected from "Dave"', self.handlers["Alice"].last())
        self.assertIn("has exited the chat", self.handlers["Dave"].last())
        self.assert_symmetric()

    async def test_listening_target_while_paired_switches(self):
        await self.pair("Alice", "Dave")

        outcome = await self.pairing.request_peer(self.people["Alice"], "Bob")

        self.assertEqual(outcome, PairingOutcome.PAIRED)
        self.assertIs(self.people["Alice"].peer, self.people["Bob"])
        self.assertIs(self.people["Bob"].peer, self.people["Alice"])
        self.assertTrue(self.people["Dave"].is_listening)
        self.assertEqual(self.handlers["Alice"].lines, [
            'SVR: You are now being disconnected from "Dave"',
            'SVR: You are now connected with "Bob"',
        ])
        self.assertIn("has exited the chat", self.handlers["Dave"].last())
        self.assert_symmetric()

    async def test_cannot_pair_with_self(self):
        outcome = await self.pairing.request_peer(self.people["Alice"], "Alice")

        self.assertEqual(outcome, PairingOutcome.SELF)
        self.assertTrue(self.people["Alice"].is_listening)
        self.assert_symmetric()

    async def test_teardown(self):
        await self.pair("Alice", "Bob")

        self.assertTrue(await self.pairing.teardown(self.people["Bob"]))
        self.assertFalse(await self.pairing.teardown(self.people["Bob"]))

        self.assertTrue(self.people["Alice"].is_listening)
        self.assertIn('User "Bob" has exited the chat', self.handlers["Alice"].last())
        self.assert_symmetric()

    async def test_release_leaves_peer_listening_and_unregistered(self):
        await self.pair("Alice", "Bob")

        await self.pairing.release(self.people["Alice"])

        self.assertIsNone(self.people["Bob"].peer)
        self.assertTrue(self.people["Bob"].is_listening)
        self.assertNotIn("Alice", self.registry)
        self.assertIsNone(self.registry.handler_for(self.people["Alice"]))
        self.assertIn("has exited the chat", self.handlers["Bob"].last())

    async def test_rename_keeps_pairing_and_notifies_peer(self):
        await self.pair("Alice", "Bob")

        changed = await self.pairing.rename(self.people["Alice"], "Alicia")

        self.assertTrue(changed)
        self.assertIs(self.people["Bob"].peer, self.people["Alice"])
        self.assertEqual(self.handlers["Bob"].lines,
                         ['SVR: Your peer has changed their name to: "Alicia".'])
        self.assertEqual(await self.pairing.peer_name(self.people["Bob"]), "Alicia")
        self.assert_symmetric()

    async def test_rename_conflict_sends_nothing_to_peer(self):
        await self.pair("Alice", "Bob")

        with self.assertRaises(NameInUseError):
            await self.pairing.rename(self.people["Alice"], "Carol")

        self.assertEqual(self.handlers["Bob"].lines, [])
        self.assertEqual(self.people["Alice"].name, "Alice")

    async def test_peer_name_when_listening(self):
        self.assertEqual(await self.pairing.peer_name(self.people["Alice"]), "Listener")

    async def test_route_echoes_when_listening(self):
        relayed = await self.pairing.route(self.people["Alice"], "hi")

        self.assertFalse(relayed)
        self.assertEqual(self.handlers["Alice"].lines, ["LISTENER_MODE_ECHO: hi"])

    async def test_route_relays_to_peer_when_paired(self):
        await self.pair("Alice", "Bob")

        relayed = await self.pairing.route(self.people["Alice"], "hi")

        self.assertTrue(relayed)
        self.assertEqual(self.handlers["Bob"].lines, ["Alice: hi"])
        self.assertEqual(self.handlers["Alice"].lines, [])


if __name__ == '__main__':
    unittest.main()
