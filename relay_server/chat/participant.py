"""
Participant module.

A Participant is the server-side record of one connected client.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(eq=False)
class Participant:
    """
    One connected client identity.

    Participants compare and hash by identity, so a rename never changes
    which registry entry they belong to. `name` is changed only by the
    Registry and `peer` only by the PairingStateMachine.

    Listen mode is not stored separately: `is_listening` is computed from
    `peer`, so it can never disagree with it.
    """
    address: str
    name: str = ''
    peer: Optional['Participant'] = field(default=None, repr=False)

    @property
    def is_listening(self) -> bool:
        """True while the participant has no peer."""
        return self.peer is None

    @property
    def is_paired(self) -> bool:
        return self.peer is not None
