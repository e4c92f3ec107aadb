"""Reading and rewriting ``composer.json``.

:class:`ComposerManifest` exposes the parts of the manifest that drive update
checks (``require``, ``require-dev``, ``minimum-stability``,
``prefer-stable`` and the project's PHP constraint) and writes updated
constraints back without disturbing the rest of the document: key order,
the detected indentation and the trailing newline are all kept.

Typical usage::

    manifest = ComposerManifest.load("composer.json")
    for name, constraint in manifest.dependencies(exclude=["phpunit/phpunit"]).items():
        ...
    manifest.apply_updates(updates)
    manifest.save()
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from phpkeeper.constants import DEFAULT_INDENT, PLATFORM_PACKAGES, PLATFORM_PREFIXES
from phpkeeper.core.reformatter import format_new_version
from phpkeeper.core.stability import Stability
from phpkeeper.exceptions import ParseError
from phpkeeper.models.update import PackageUpdate
from phpkeeper.utils.filesystem import safe_read_file, safe_write_file
from phpkeeper.utils.logger import get_logger

logger = get_logger("manifest")

REQUIRE = "require"
REQUIRE_DEV = "require-dev"

_INDENT_RE = re.compile(r"^([ \t]+)\S", re.MULTILINE)


def detect_indent(raw: str) -> str:
    """Return the indentation unit used by a JSON document.

    The whitespace in front of the first indented line is taken as the
    unit, which for a pretty-printed object is one nesting level. Documents
    without any indented line fall back to four spaces.

    Example::

        >>> detect_indent('{\\n  "name": "acme/app"\\n}')
        '  '
    """
    match = _INDENT_RE.search(raw)
    return match.group(1) if match else DEFAULT_INDENT


def is_platform_package(name: str) -> bool:
    """Return True for ``php``, extensions and other non-registry requirements."""
    lower = name.lower()
    return lower in PLATFORM_PACKAGES or lower.startswith(tuple(PLATFORM_PREFIXES))


class ComposerManifest:
    """An in-memory ``composer.json`` bound to its file path.

    Args:
        path: Location of the manifest.
        data: Decoded JSON object.
        indent: Indentation unit to write back with.
    """

    def __init__(
        self,
        path: Union[str, Path],
        data: Dict[str, Any],
        *,
        indent: str = DEFAULT_INDENT,
    ) -> None:
        self.path = Path(path)
        self.data = data
        self.indent = indent

    @classmethod
    def load(cls, path: Union[str, Path]) -> "ComposerManifest":
        """Read and decode a manifest.

        Raises:
            FileOperationError: The file is missing or unreadable.
            ParseError: The file is not a JSON object.
        """
        raw = safe_read_file(path)

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(
                f"Invalid JSON in manifest: {exc.msg}",
                line_number=exc.lineno,
                column=exc.colno,
                file_path=str(path),
            ) from exc

        if not isinstance(data, dict):
            raise ParseError(
                "Manifest must contain a JSON object",
                file_path=str(path),
            )

        indent = detect_indent(raw)
        logger.debug("Loaded %s (indent=%r)", path, indent)
        return cls(path, data, indent=indent)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def _section(self, key: str) -> Dict[str, str]:
        section = self.data.get(key)
        if not isinstance(section, Mapping):
            return {}
        return {name: value for name, value in section.items() if isinstance(value, str)}

    @property
    def require(self) -> Dict[str, str]:
        return self._section(REQUIRE)

    @property
    def require_dev(self) -> Dict[str, str]:
        return self._section(REQUIRE_DEV)

    @property
    def minimum_stability(self) -> Stability:
        """``minimum-stability``, defaulting to ``stable``."""
        return Stability.parse(self.data.get("minimum-stability"))

    @property
    def prefer_stable(self) -> bool:
        """``prefer-stable``, defaulting to ``True``."""
        value = self.data.get("prefer-stable")
        return value if isinstance(value, bool) else True

    @property
    def php_constraint(self) -> Optional[str]:
        """The project's own ``require.php`` constraint, if declared."""
        return self.require.get("php")

    def is_dev_dependency(self, name: str) -> bool:
        return name in self.require_dev and name not in self.require

    def dependencies(self, exclude: Iterable[str] = ()) -> Dict[str, str]:
        """Registry packages from ``require`` and ``require-dev``.

        Platform requirements (``php``, ``ext-*``, ``lib-*``...) and names in
        *exclude* (case-insensitive) are left out. A package declared in
        both sections reports its ``require-dev`` constraint.
        """
        excluded = {name.strip().lower() for name in exclude if name.strip()}
        merged = {**self.require, **self.require_dev}
        return {
            name: constraint
            for name, constraint in merged.items()
            if not is_platform_package(name) and name.lower() not in excluded
        }

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def apply_updates(self, updates: Iterable[PackageUpdate]) -> List[Tuple[str, str, str]]:
        """Rewrite constraints for *updates* in both require sections.

        Each new constraint keeps the style of the one it replaces.

        Returns:
            ``(name, old, new)`` for every constraint that changed.
        """
        changes: List[Tuple[str, str, str]] = []

        for update in updates:
            for key in (REQUIRE, REQUIRE_DEV):
                section = self.data.get(key)
                if not isinstance(section, dict):
                    continue
                current = section.get(update.name)
                if not isinstance(current, str):
                    continue

                new = format_new_version(current, update.latest_version)
                if new != current:
                    section[update.name] = new
                    changes.append((update.name, current, new))
                    logger.debug("%s [%s]: %s -> %s", update.name, key, current, new)

        return changes

    def dumps(self) -> str:
        """Serialize with the detected indent and a trailing newline."""
        return json.dumps(self.data, indent=self.indent, ensure_ascii=False) + "\n"

    def save(self, *, backup: bool = False) -> Optional[Path]:
        """Atomically write the manifest back to :attr:`path`.

        Returns:
            Path to the backup taken before writing, if requested.
        """
        backup_path = safe_write_file(self.path, self.dumps(), backup=backup)
        logger.info("Wrote %s", self.path)
        return backup_path
