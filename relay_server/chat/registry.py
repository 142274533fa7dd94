"""
Registry module.

This module holds the shared name -> participant and participant -> handler
mappings. Both mappings are always mutated together under `Registry.lock`,
which also guards every pairing transition.
"""

import asyncio
from typing import Dict, List, Optional

from relay_common.constants import DEFAULT_NAME_PREFIX, RESERVED_NAMES
from relay_server.chat.participant import Participant


class RegistryError(Exception):
    """Base class for rejected registry operations."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name


class NameInUseError(RegistryError):
    """The name is held by another participant."""


class ReservedNameError(RegistryError):
    """The name collides with a protocol label."""


class BlankNameError(RegistryError):
    """The name is empty once whitespace is trimmed."""


class Registry:
    """Shared participant registry."""

    def __init__(self):
        self.by_name: Dict[str, Participant] = {}  # name -> participant
        self.by_participant: Dict[Participant, object] = {}  # participant -> connection handler
        self.lock = asyncio.Lock()  # Protect registry and pairing state

    def __len__(self) -> int:
        return len(self.by_name)

    def __contains__(self, name: str) -> bool:
        return name in self.by_name

    async def register_default(self, participant: Participant, handler) -> str:
        """Give the participant the lowest free default name and register it."""
        async with self.lock:
            number = len(self.by_name)
            while f"{DEFAULT_NAME_PREFIX}{number}" in self.by_name:
                number += 1

            name = f"{DEFAULT_NAME_PREFIX}{number}"
            participant.name = name
            self.by_name[name] = participant
            self.by_participant[participant] = handler
            return name

    async def rename(self, participant: Participant, new_name: str) -> bool:
        """
        Rename a registered participant.

        Returns False when the trimmed name is already the participant's name.
        Raises a RegistryError subclass when the name can't be taken.
        """
        async with self.lock:
            return self.rename_locked(participant, new_name)

    def rename_locked(self, participant: Participant, new_name: str) -> bool:
        new_name = new_name.strip()

        if new_name == participant.name:
            return False
        if new_name in RESERVED_NAMES:
            raise ReservedNameError(new_name)
        if not new_name:
            raise BlankNameError(new_name)

        holder = self.by_name.get(new_name)
        if holder is not None and holder is not participant:
            raise NameInUseError(new_name)

        if self.by_name.get(participant.name) is participant:
            del self.by_name[participant.name]
        participant.name = new_name
        self.by_name[new_name] = participant
        return True

    def lookup(self, name: str) -> Optional[Participant]:
        """Find a participant by name."""
        return self.by_name.get(name)

    def handler_for(self, participant: Participant):
        """Get the connection handler that writes to this participant."""
        return self.by_participant.get(participant)

    async def remove(self, participant: Participant):
        """Remove a participant from both mappings. Safe to call twice."""
        async with self.lock:
            self.remove_locked(participant)

    def remove_locked(self, participant: Participant):
        if self.by_name.get(participant.name) is participant:
            del self.by_name[participant.name]
        self.by_participant.pop(participant, None)

    def names(self) -> List[str]:
        """
        Snapshot of connected names.

        Not taken under the lock; the listing is advisory and a concurrent
        rename may or may not be reflected.
        """
        return list(self.by_name)
