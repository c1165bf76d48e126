"""Locate and load the skill rules document."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Optional

from skill_guard.constants import CLAUDE_DIRNAME, RULES_FILENAME
from skill_guard.errors import MissingRulesFileError
from skill_guard.rules.models import RuleSet
from skill_guard.rules.parser import load_rule_set

logger = logging.getLogger(__name__)

_RULES_CACHE: dict[str, tuple[float, RuleSet]] = {}


class RulesRepository:
    def __init__(
        self,
        rules_path: Optional[Path] = None,
        plugin_root: Optional[Path] = None,
        project_dir: Optional[Path] = None,
    ) -> None:
        self._rules_path = rules_path
        self._plugin_root = plugin_root
        self._project_dir = project_dir

    def candidates(self) -> list[Path]:
        if self._rules_path is not None:
            return [self._rules_path.expanduser()]
        paths: list[Path] = []
        if self._plugin_root is not None:
            own = self._plugin_root / RULES_FILENAME
            paths.append(own)
            # Rules may ship with a sibling plugin of the same bundle.
            paths.extend(
                path
                for path in sorted(self._plugin_root.parent.glob(f"*/{RULES_FILENAME}"))
                if path != own
            )
        project_dir = self._project_dir or Path.cwd()
        paths.append(project_dir / CLAUDE_DIRNAME / RULES_FILENAME)
        return paths

    def resolve(self) -> Path:
        candidates = self.candidates()
        for path in candidates:
            if path.is_file():
                return path
        raise MissingRulesFileError(
            candidates[0] if len(candidates) == 1 else None, searched=candidates
        )

    def load(self, required: Iterable[str] = ()) -> RuleSet:
        path = self.resolve()
        required = tuple(required)
        key = str(path.resolve())
        mtime = path.stat().st_mtime
        cached = _RULES_CACHE.get(key)
        if cached is not None and cached[0] == mtime and not required:
            return cached[1]

        rule_set = load_rule_set(path, required=required)
        _RULES_CACHE[key] = (mtime, rule_set)
        logger.debug("Loaded %d rules (version %s) from %s", len(rule_set), rule_set.version, path)
        return rule_set


def clear_rules_cache() -> None:
    _RULES_CACHE.clear()
