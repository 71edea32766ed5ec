"""Host-facing shim: document buffers, command registration and the tracker plugin.

The tracker depends on the host only through two capabilities: a buffer it
can read and overwrite in full, and a registry it can add named commands to.
FileBuffer and CommandRegistry are the implementations used by the CLI.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from huzzle_tracker.catalog.scrape import Fetcher
from huzzle_tracker.config import TrackerSettings
from huzzle_tracker.document.pipeline import DocumentUpdater, UpdateResult
from huzzle_tracker.errors import CatalogFetchError, UnknownCommandError

logger = logging.getLogger(__name__)

UPDATE_LIST_COMMAND = "update-list"


# ---------------------------------------------------------------------------
# Capabilities
# ---------------------------------------------------------------------------


class DocumentBuffer(Protocol):
    """Full-text get/set access to the document being edited."""

    def get_value(self) -> str: ...

    def set_value(self, value: str) -> None: ...


class FileBuffer:
    """DocumentBuffer backed by a file on disk (a missing file reads as empty)."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def get_value(self) -> str:
        if not self.path.exists():
            return ""
        return self.path.read_text(encoding="utf-8")

    def set_value(self, value: str) -> None:
        self.path.write_text(value, encoding="utf-8")


class StringBuffer:
    """In-memory DocumentBuffer, used for dry runs."""

    def __init__(self, value: str = ""):
        self.value = value

    def get_value(self) -> str:
        return self.value

    def set_value(self, value: str) -> None:
        self.value = value


@dataclass(frozen=True)
class Command:
    command_id: str
    name: str
    callback: Callable[[DocumentBuffer], None]


class CommandRegistry:
    """Named actions the user can trigger against a buffer."""

    def __init__(self):
        self._commands: dict[str, Command] = {}

    def add_command(self, command_id: str, name: str, callback: Callable[[DocumentBuffer], None]) -> None:
        self._commands[command_id] = Command(command_id, name, callback)

    def commands(self) -> list[Command]:
        return list(self._commands.values())

    def invoke(self, command_id: str, buffer: DocumentBuffer) -> None:
        """Run a registered command against ``buffer``."""
        command = self._commands.get(command_id)
        if command is None:
            raise UnknownCommandError(f"Unknown command '{command_id}'")
        logger.debug("Invoking command %s", command_id)
        command.callback(buffer)


# ---------------------------------------------------------------------------
# Plugin
# ---------------------------------------------------------------------------


def _describe_failures(result: UpdateResult) -> str:
    return ", ".join(f"{failure.url} ({failure.error})" for failure in result.reconcile.failures)


class HuzzlesTracker:
    """The tracker as seen by the host: registers its command and reports outcomes via ``notify``."""

    def __init__(
        self,
        settings: TrackerSettings | None = None,
        fetch: Fetcher | None = None,
        notify: Callable[[str], None] = print,
    ):
        self.updater = DocumentUpdater(settings, fetch)
        self.notify = notify
        self.last_result: UpdateResult | None = None

    def on_load(self, registry: CommandRegistry) -> None:
        registry.add_command(UPDATE_LIST_COMMAND, "Update list", self.update_list)

    def update_list(self, buffer: DocumentBuffer) -> UpdateResult | None:
        """Rebuild the region in ``buffer``; on total fetch failure leave it untouched.

        Returns the UpdateResult, or None when nothing was written.
        """
        content = buffer.get_value()
        try:
            result = self.updater.update(content)
        except CatalogFetchError as exc:
            logger.error("Update aborted: %s", exc)
            details = "; ".join(f"{failure.url}: {failure.error}" for failure in exc.failures)
            self.notify(f"Hanayama Huzzles list not updated: {details or exc}")
            self.last_result = None
            return None

        buffer.set_value(result.content)
        self.last_result = result

        count = len(result.reconcile.items)
        if result.reconcile.partial:
            self.notify(f"Hanayama Huzzles list updated with {count} items, but some sources failed: {_describe_failures(result)}")
        else:
            self.notify(f"Hanayama Huzzles list updated ({count} items)")
        return result
