"""Working directory resolution and command parsing."""

import os
import re
from typing import Optional

from ..models.directory import ResolveError, ResolveResult
from ..utils.logger import get_component_logger

_DIRECTORY_WORDS = r"(?:cwd|dir|directory|working[- ]?directory)"

_SHORT_SET_RE = re.compile(r"^cwd\s+(.+)$", re.IGNORECASE)
_LONG_SET_RE = re.compile(rf"^set\s+{_DIRECTORY_WORDS}\s+(.+)$", re.IGNORECASE)
_GET_RE = re.compile(rf"^(?:get\s+)?{_DIRECTORY_WORDS}\??$", re.IGNORECASE)


class DirectoryResolver:
    """Resolve user-supplied paths to existing absolute directories."""

    def __init__(self, base_directory: Optional[str] = None):
        """
        Initialize the resolver.

        Args:
            base_directory: Root that relative paths are tried against before
                the process working directory
        """
        self.base_directory = base_directory or None
        self.logger = get_component_logger("DirectoryResolver")

    def resolve(self, directory: str) -> ResolveResult:
        """
        Resolve a path string.

        Candidates are tried in order: the path itself if absolute, then
        relative to the base directory, then relative to the process working
        directory. The first candidate that exists wins; if it is not a
        directory the result is NOT_A_DIRECTORY rather than NOT_FOUND.

        Args:
            directory: Path as typed by the user

        Returns:
            ResolveResult with the absolute path or the failure kind
        """
        candidate = self._find_existing(directory)
        if candidate is None:
            return ResolveResult(error=ResolveError.NOT_FOUND)

        if not os.path.isdir(candidate):
            self.logger.warning(f"Path is not a directory: {candidate}")
            return ResolveResult(error=ResolveError.NOT_A_DIRECTORY)

        return ResolveResult(path=candidate)

    def _find_existing(self, directory: str) -> Optional[str]:
        if os.path.isabs(directory):
            if os.path.exists(directory):
                return os.path.abspath(directory)
            return None

        if self.base_directory:
            base_relative = os.path.abspath(os.path.join(self.base_directory, directory))
            if os.path.exists(base_relative):
                self.logger.debug(
                    f"Found directory relative to base: {directory} -> {base_relative}"
                )
                return base_relative

        cwd_relative = os.path.abspath(directory)
        if os.path.exists(cwd_relative):
            self.logger.debug(f"Found directory relative to cwd: {directory} -> {cwd_relative}")
            return cwd_relative

        return None

    @staticmethod
    def parse_set_command(text: str) -> Optional[str]:
        """
        Extract the path from a set-directory command.

        Accepts `cwd <path>` and `set cwd|dir|directory|working directory <path>`,
        case-insensitively.

        Returns:
            The trimmed path, or None if the text is not a set command
        """
        text = text.strip()
        match = _SHORT_SET_RE.match(text) or _LONG_SET_RE.match(text)
        if match:
            return match.group(1).strip()
        return None

    @staticmethod
    def is_get_command(text: str) -> bool:
        """Whether the text asks for the current directory, e.g. `cwd?` or `get dir`."""
        return _GET_RE.match(text.strip()) is not None
