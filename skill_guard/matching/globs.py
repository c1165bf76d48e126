"""Glob patterns for project-relative file paths.

``**/`` spans zero or more directories, ``**`` spans anything, ``*`` and
``?`` stay within one path segment, ``[...]`` is a character class and
``{a,b}`` is alternation.
"""

from __future__ import annotations

import functools
import re
from pathlib import Path, PurePosixPath
from typing import Optional


@functools.lru_cache(maxsize=1024)
def compile_glob(pattern: str) -> re.Pattern[str]:
    if not pattern:
        raise ValueError("glob pattern cannot be empty")
    return re.compile(_translate(pattern))


def glob_match(pattern: str, path: str) -> bool:
    return compile_glob(pattern).fullmatch(path) is not None


def normalize_path(file_path: str, project_dir: Optional[Path] = None) -> str:
    text = file_path.replace("\\", "/")
    if project_dir is not None:
        candidate = PurePosixPath(text)
        root = PurePosixPath(str(project_dir).replace("\\", "/"))
        if candidate.is_absolute() and root.is_absolute():
            try:
                text = candidate.relative_to(root).as_posix()
            except ValueError:
                pass
    while text.startswith("./"):
        text = text[2:]
    return text


def _translate(pattern: str) -> str:
    parts: list[str] = []
    depth = 0
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                index += 2
                if index < length and pattern[index] == "/":
                    index += 1
                    parts.append("(?:.*/)?")
                else:
                    parts.append(".*")
                continue
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 2)
            if end == -1:
                parts.append(re.escape(char))
            else:
                body = pattern[index + 1 : end].replace("\\", "\\\\")
                if body.startswith("!"):
                    body = "^" + body[1:]
                parts.append("[" + body + "]")
                index = end + 1
                continue
        elif char == "{":
            depth += 1
            parts.append("(?:")
        elif char == "}" and depth:
            depth -= 1
            parts.append(")")
        elif char == "," and depth:
            parts.append("|")
        else:
            parts.append(re.escape(char))
        index += 1
    if depth:
        raise ValueError(f"unbalanced braces in glob: {pattern}")
    return "".join(parts)
