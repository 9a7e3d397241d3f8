"""
Key pattern resolution.

Expands a configured key pattern into the concrete keys that exist in a
registry source. Resolution runs in two independent passes:

1. SID substitution: the ``{SID}`` placeholder is replaced by the SID filter
   (which may itself be a wildcard such as ``S-1-5-21-*``).
2. Wildcard expansion: each path segment containing ``*``, ``?`` or ``[`` is
   matched case-insensitively against the subkeys present at that level.

Supports patterns like:
- "HKU\\{SID}\\Software\\Microsoft\\Windows\\CurrentVersion\\Run"
- "HKLM\\SYSTEM\\ControlSet*\\Control\\Session Manager" (mid-path wildcard)
- "HKLM\\SOFTWARE\\...\\Browser Helper Objects\\*" (trailing wildcard)
"""

from __future__ import annotations

import re
from fnmatch import fnmatchcase
from typing import List

from core.exceptions import RegistryAccessError, RegistryKeyNotFoundError
from core.logging import get_logger
from sources.base import RegistrySource, join_key_path, split_key_path

LOGGER = get_logger("baseline.resolver")

SID_PLACEHOLDER = "{SID}"
DEFAULT_SID_FILTER = "*"

_SID_PLACEHOLDER_RE = re.compile(re.escape(SID_PLACEHOLDER), re.IGNORECASE)
_WILDCARD_CHARS = frozenset("*?[")


def has_wildcard(segment: str) -> bool:
    return any(ch in _WILDCARD_CHARS for ch in segment)


def substitute_sid(pattern: str, sid_filter: str = DEFAULT_SID_FILTER) -> str:
    """Replace the SID placeholder (case-insensitive) with the SID filter."""
    return _SID_PLACEHOLDER_RE.sub(lambda _match: sid_filter, pattern)


class KeyResolver:
    """Resolves key patterns against one registry source."""

    def __init__(self, source: RegistrySource):
        self._source = source

    def exists(self, path: str) -> bool:
        """Exact-path existence check (no placeholder or wildcard expansion)."""
        try:
            return self._source.key_exists(path)
        except RegistryAccessError as e:
            # Something is there even if it cannot be opened
            LOGGER.debug("Access error checking %s: %s", path, e)
            return True

    def resolve(self, pattern: str, sid_filter: str = DEFAULT_SID_FILTER) -> List[str]:
        """
        Resolve a key pattern to the concrete keys that currently exist.

        Args:
            pattern: Key path, optionally with {SID} and wildcard segments
            sid_filter: Value substituted for {SID} (wildcards allowed)

        Returns:
            Concrete key paths in enumeration order; empty when nothing matches
        """
        concrete = substitute_sid(pattern, sid_filter)
        root, parts = split_key_path(concrete)

        if not any(has_wildcard(part) for part in parts):
            path = join_key_path(root, parts)
            return [path] if self.exists(path) else []

        results: List[str] = []
        self._expand(root, parts, 0, [], results)

        # Overlapping wildcards can reach the same key twice
        unique: List[str] = []
        seen = set()
        for path in results:
            folded = path.lower()
            if folded not in seen:
                seen.add(folded)
                unique.append(path)
        return unique

    def _expand(
        self, root: str, parts: List[str], index: int, path_acc: List[str], results: List[str]
    ) -> None:
        """
        Recursively expand wildcard parts of a key path.

        Args:
            root: Root alias (HKLM, HKU, ...)
            parts: Path components, some with wildcards
            index: Current index into parts
            path_acc: Resolved components so far
            results: Output list of concrete key paths
        """
        if index >= len(parts):
            results.append(join_key_path(root, path_acc))
            return

        part = parts[index]
        current = join_key_path(root, path_acc)

        if not has_wildcard(part):
            candidate = path_acc + [part]
            if self.exists(join_key_path(root, candidate)):
                self._expand(root, parts, index + 1, candidate, results)
            else:
                LOGGER.debug("Key part '%s' not found under %s", part, current)
            return

        try:
            subkeys = self._source.subkey_names(current)
        except RegistryKeyNotFoundError:
            LOGGER.debug("Key %s vanished during expansion", current)
            return
        except RegistryAccessError as e:
            LOGGER.warning("Cannot enumerate subkeys of %s: %s", current, e)
            return

        folded_part = part.lower()
        for name in subkeys:
            if fnmatchcase(name.lower(), folded_part):
                self._expand(root, parts, index + 1, path_acc + [name], results)
