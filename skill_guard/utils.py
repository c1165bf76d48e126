import json
import os
import tempfile
from pathlib import Path
from typing import Any, Mapping

from skill_guard.constants import FALSY_ENV_VALUES


def read_json(path: Path) -> Any:
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)


def read_json_safe(path: Path) -> tuple[Any | None, str | None]:
    if not path.exists():
        return None, None
    try:
        if path.stat().st_size == 0:
            return None, None
        return read_json(path), None
    except (OSError, ValueError) as exc:
        return None, str(exc)


def write_json_atomic(path: Path, payload: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=2, sort_keys=False)
            handle.write("\n")
        os.replace(tmp_name, path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def read_text_safe(path: Path) -> str | None:
    try:
        return path.read_text(encoding="utf-8", errors="replace")
    except (OSError, ValueError):
        return None


def is_truthy(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() not in FALSY_ENV_VALUES


def env_flag(env: Mapping[str, str], name: str) -> bool:
    return is_truthy(env.get(name))


def compact_home_path(path: str | Path) -> str:
    text = str(path)
    home = str(Path.home())
    if text == home:
        return "~"
    home_prefix = f"{home}/"
    if text.startswith(home_prefix):
        return f"~/{text[len(home_prefix):]}"
    return text
