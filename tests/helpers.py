"""
Shared test helpers.
"""

from typing import List


class RecordingHandler:
    """Stand-in for ConnectionHandler that records delivered lines."""

    def __init__(self):
        self.lines: List[str] = []

    def deliver(self, line: str):
        self.lines.append(line)

    def last(self) -> str:
        return self.lines[-1]

    def clear(self):
        self.lines.clear()
