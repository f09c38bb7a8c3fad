"""Saved command catalog.

Commands are stored as a JSON list in ``$CMDSTACK_HOME/commands.json``. Each
command has an alias, the command template itself, an optional ``/``-separated
tag path, an optional note, a favourite flag and a last-used timestamp.
"""

from __future__ import annotations

import json
import logging
import time
from dataclasses import asdict, dataclass, fields
from difflib import SequenceMatcher
from pathlib import Path
from typing import Any, Dict, List, Optional

from cmdstack.config import get_home_dir
from cmdstack.parameters.parser import parse

logger = logging.getLogger("cmdstack.commands")

COMMANDS_FILENAME = "commands.json"
SEARCH_THRESHOLD = 50.0
TAG_SEPARATOR = "/"


class InvalidCommandError(ValueError):
    """Alias or command text is empty."""


class CommandNotFoundError(KeyError):
    """No command with the requested id."""


@dataclass
class Command:
    """A saved command template"""

    id: int
    alias: str
    command: str
    tag: Optional[str] = None
    note: Optional[str] = None
    favourite: bool = False
    last_used: int = 0  # epoch seconds, 0 if never used

    @property
    def tag_parts(self) -> List[str]:
        if not self.tag:
            return []
        return [part for part in self.tag.split(TAG_SEPARATOR) if part]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Command:
        known = {f.name for f in fields(cls)}
        return cls(**{k: v for k, v in data.items() if k in known})


def _validate(alias: str, command: str) -> None:
    if not alias or not alias.strip() or not command or not command.strip():
        raise InvalidCommandError("Alias and command must not be empty")


def _as_records(data: Any) -> List[Dict[str, Any]]:
    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError("Expected a list of command objects")
    return data


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def _match_score(query: str, value: Optional[str]) -> float:
    """Score 0-100 of how well ``query`` matches ``value``."""
    if not query or not value:
        return 0.0
    query_lower = query.lower()
    value_lower = value.lower()
    if query_lower in value_lower:
        return 100.0
    words = query_lower.split()
    if words and all(word in value_lower for word in words):
        return 80.0
    return SequenceMatcher(None, query_lower, value_lower).ratio() * 100


class CommandStore:
    """Manages the saved command catalog."""

    def __init__(self, commands_file: Optional[Path] = None):
        self.commands_file = commands_file or (get_home_dir() / COMMANDS_FILENAME)
        self.commands_file.parent.mkdir(parents=True, exist_ok=True)
        self._commands: Dict[int, Command] = {}
        self._load()

    def _load(self) -> None:
        if not self.commands_file.exists():
            self._commands = {}
            return
        try:
            data = json.loads(self.commands_file.read_text(encoding="utf-8")) or []
            records = _as_records(data)
            self._commands = {c.id: c for c in (Command.from_dict(d) for d in records)}
        except (OSError, ValueError, TypeError) as exc:
            logger.warning("Ignoring corrupted commands file %s: %s", self.commands_file, exc)
            self._commands = {}

    def _save(self) -> None:
        data = [c.to_dict() for c in self._commands.values()]
        self.commands_file.write_text(
            json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8"
        )

    def _next_id(self) -> int:
        return max(self._commands, default=0) + 1

    def add(
        self,
        alias: str,
        command: str,
        tag: Optional[str] = None,
        note: Optional[str] = None,
        favourite: bool = False,
    ) -> Command:
        """
        Add a new command.

        Raises:
            InvalidCommandError: If alias or command is empty
        """
        _validate(alias, command)
        entry = Command(
            id=self._next_id(),
            alias=alias.strip(),
            command=command,
            tag=_clean(tag),
            note=_clean(note),
            favourite=favourite,
        )
        self._commands[entry.id] = entry
        self._save()
        logger.info("Added command %d (%s)", entry.id, entry.alias)
        return entry

    def get(self, command_id: int) -> Command:
        try:
            return self._commands[command_id]
        except KeyError:
            raise CommandNotFoundError(command_id) from None

    def update(
        self,
        command_id: int,
        alias: Optional[str] = None,
        command: Optional[str] = None,
        tag: Optional[str] = None,
        note: Optional[str] = None,
        favourite: Optional[bool] = None,
    ) -> Command:
        """Update the given fields of a command; ``None`` leaves a field as is."""
        entry = self.get(command_id)
        new_alias = entry.alias if alias is None else alias.strip()
        new_command = entry.command if command is None else command
        _validate(new_alias, new_command)

        entry.alias = new_alias
        entry.command = new_command
        if tag is not None:
            entry.tag = _clean(tag)
        if note is not None:
            entry.note = _clean(note)
        if favourite is not None:
            entry.favourite = favourite
        self._save()
        return entry

    def delete(self, command_id: int) -> None:
        self.get(command_id)
        del self._commands[command_id]
        self._save()
        logger.info("Deleted command %d", command_id)

    def mark_used(self, command_id: int, timestamp: Optional[int] = None) -> Command:
        entry = self.get(command_id)
        entry.last_used = int(time.time()) if timestamp is None else timestamp
        self._save()
        return entry

    def toggle_favourite(self, command_id: int) -> Command:
        entry = self.get(command_id)
        return self.update(command_id, favourite=not entry.favourite)

    def list(
        self,
        order_by_use: bool = False,
        favourites_only: bool = False,
        limit: Optional[int] = None,
    ) -> List[Command]:
        """
        List commands.

        Args:
            order_by_use: Most recently used first (otherwise by id)
            favourites_only: Only favourite commands
            limit: Maximum number of commands returned

        Returns:
            Matching commands
        """
        commands = list(self._commands.values())
        if favourites_only:
            commands = [c for c in commands if c.favourite]
        if order_by_use:
            commands.sort(key=lambda c: (-c.last_used, c.id))
        else:
            commands.sort(key=lambda c: c.id)
        if limit is not None:
            commands = commands[:limit]
        return commands

    def search(
        self,
        alias: Optional[str] = None,
        command: Optional[str] = None,
        tag: Optional[str] = None,
        threshold: float = SEARCH_THRESHOLD,
    ) -> List[Command]:
        """
        Fuzzy search; a command matches if any given field scores above
        ``threshold``. Results are sorted by best score.
        """
        if alias is None and command is None and tag is None:
            raise ValueError("At least one search field is required")

        scored = []
        for entry in self._commands.values():
            score = max(
                _match_score(alias or "", entry.alias),
                _match_score(command or "", entry.command),
                _match_score(tag or "", entry.tag),
            )
            if score > threshold:
                scored.append((score, entry))

        scored.sort(key=lambda item: (-item[0], item[1].id))
        return [entry for _, entry in scored]

    def tag_tree(self) -> Dict[str, Any]:
        """Nested dict of tag path segments, e.g. ``{"git": {"remote": {}}}``."""
        tree: Dict[str, Any] = {}
        for entry in self.list():
            node = tree
            for part in entry.tag_parts:
                node = node.setdefault(part, {})
        return tree

    def export_json(self, path: Path) -> int:
        """Write all commands to ``path``; returns the number exported."""
        commands = self.list()
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            json.dumps([c.to_dict() for c in commands], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        return len(commands)

    def import_json(self, path: Path) -> int:
        """Add every command from an export file under fresh ids.

        The whole file is validated before anything is added, so a bad entry
        leaves the store unchanged.

        Raises:
            ValueError: If the file is not a list of commands, an entry has an
                empty alias or command, or a template does not parse
        """
        records = _as_records(json.loads(path.read_text(encoding="utf-8")))
        for item in records:
            alias, command = item.get("alias"), item.get("command")
            if not isinstance(alias, str) or not isinstance(command, str):
                raise InvalidCommandError("Alias and command must be strings")
            _validate(alias, command)
            parse(command)

        next_id = self._next_id()
        for offset, item in enumerate(records):
            entry = Command.from_dict({**item, "id": next_id + offset})
            entry.alias = entry.alias.strip()
            self._commands[entry.id] = entry
        imported = len(records)
        self._save()
        logger.info("Imported %d command(s) from %s", imported, path)
        return imported


_store: Optional[CommandStore] = None


def get_command_store() -> CommandStore:
    """Get the global command store."""
    global _store
    if _store is None:
        _store = CommandStore()
    return _store


def reset_command_store() -> None:
    """Reset the global store (mainly for testing)."""
    global _store
    _store = None


__all__ = [
    "Command",
    "CommandStore",
    "CommandNotFoundError",
    "InvalidCommandError",
    "get_command_store",
    "reset_command_store",
]
