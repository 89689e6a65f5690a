"""Exception hierarchy for the bridge.

Resolution failures are not exceptions: DirectoryResolver returns them as
ResolveResult values. Persistence failures are logged inside DirectoryStore.
"""

from typing import List, Optional


class BridgeError(Exception):
    """Base exception for all bridge errors."""


class ClaudeSpawnError(BridgeError):
    """The Claude CLI process could not be started."""

    def __init__(self, binary: str, reason: str):
        self.binary = binary
        self.reason = reason
        super().__init__(f"Failed to spawn Claude CLI ({binary}): {reason}")


class ClaudeExitError(BridgeError):
    """The Claude CLI exited with a non-zero status."""

    def __init__(self, returncode: int, stderr_tail: Optional[List[str]] = None):
        self.returncode = returncode
        self.stderr_tail = stderr_tail or []
        super().__init__(f"Claude CLI exited with code {returncode}")


class ProtocolDecodeError(BridgeError):
    """A single stdout line could not be decoded as a protocol message."""

    def __init__(self, line: str, reason: str):
        self.line = line
        self.reason = reason
        super().__init__(f"Failed to decode Claude output: {reason}")
