"""Hook payloads received from the assistant runtime on stdin."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional, TextIO

from skill_guard.constants import FILE_MUTATING_TOOLS, SKILL_TOOL
from skill_guard.errors import HookInputError
from skill_guard.matching.files import FileEvent
from skill_guard.rules.models import FileOperation
from skill_guard.utils import read_text_safe


def read_payload(stream: TextIO) -> dict[str, Any]:
    raw = stream.read()
    if not raw.strip():
        raise HookInputError("empty input")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise HookInputError(str(exc)) from exc
    if not isinstance(payload, dict):
        raise HookInputError("expected a JSON object")
    return payload


def _text(payload: dict[str, Any], key: str, default: str = "") -> str:
    value = payload.get(key, default)
    return value if isinstance(value, str) else default


@dataclass(frozen=True)
class PromptSubmitEvent:
    session_id: str
    prompt: str
    cwd: str = ""
    transcript_path: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "PromptSubmitEvent":
        return cls(
            session_id=_text(payload, "session_id", "default"),
            prompt=_text(payload, "prompt"),
            cwd=_text(payload, "cwd"),
            transcript_path=_text(payload, "transcript_path"),
        )


@dataclass(frozen=True)
class ToolUseEvent:
    session_id: str
    tool_name: str
    tool_input: dict[str, Any] = field(default_factory=dict)
    cwd: str = ""

    @classmethod
    def from_payload(cls, payload: dict[str, Any]) -> "ToolUseEvent":
        tool_input = payload.get("tool_input")
        return cls(
            session_id=_text(payload, "session_id", "default"),
            tool_name=_text(payload, "tool_name"),
            tool_input=tool_input if isinstance(tool_input, dict) else {},
            cwd=_text(payload, "cwd"),
        )

    @property
    def file_path(self) -> str:
        return _text(self.tool_input, "file_path") or _text(self.tool_input, "notebook_path")

    @property
    def is_file_mutation(self) -> bool:
        return self.tool_name in FILE_MUTATING_TOOLS and bool(self.file_path)

    @property
    def skill_name(self) -> str | None:
        if self.tool_name != SKILL_TOOL:
            return None
        name = _text(self.tool_input, "skill") or _text(self.tool_input, "command")
        return name.strip().lstrip("/") or None


def build_file_event(event: ToolUseEvent, base_dir: Optional[Path] = None) -> FileEvent:
    """Derive the operation kind and post-edit content for a file tool call."""
    file_path = event.file_path
    disk_path = Path(file_path)
    if not disk_path.is_absolute() and base_dir is not None:
        disk_path = base_dir / disk_path

    if event.tool_name == "Write":
        operation = FileOperation.MODIFY if disk_path.exists() else FileOperation.CREATE
        content = event.tool_input.get("content")
        return FileEvent(
            file_path=file_path,
            operation=operation,
            content=content if isinstance(content, str) else None,
        )

    if event.tool_name == "NotebookEdit":
        source = event.tool_input.get("new_source")
        return FileEvent(file_path=file_path, content=source if isinstance(source, str) else None)

    existing = read_text_safe(disk_path)
    if existing is None:
        return FileEvent(file_path=file_path)

    if event.tool_name == "MultiEdit":
        edits = event.tool_input.get("edits")
        edits = [item for item in edits if isinstance(item, dict)] if isinstance(edits, list) else []
    else:
        edits = [event.tool_input]

    content = existing
    for edit in edits:
        content = _apply_edit(content, edit)
    return FileEvent(file_path=file_path, content=content)


def _apply_edit(content: str, edit: dict[str, Any]) -> str:
    old = edit.get("old_string")
    new = edit.get("new_string")
    if not isinstance(old, str) or not isinstance(new, str) or not old:
        return content
    count = -1 if edit.get("replace_all") else 1
    return content.replace(old, new, count)
