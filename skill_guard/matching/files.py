from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from skill_guard.errors import EvaluationError
from skill_guard.matching.globs import normalize_path
from skill_guard.matching.triggers import (
    Trigger,
    content_triggers_for,
    exclusion_triggers_for,
    path_triggers_for,
)
from skill_guard.rules.models import (
    FileOperation,
    MatchResult,
    MatchSource,
    Rule,
    RuleSet,
    sort_matches,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class FileEvent:
    file_path: str
    operation: FileOperation = FileOperation.MODIFY
    content: Optional[str] = None


class FileEventMatcher:
    """Match a file edit against path, exclusion and content triggers.

    Exclusions always win over path patterns. Content patterns require the
    content snapshot; an unavailable snapshot leaves them unsatisfied.
    """

    def __init__(self, rule_set: RuleSet, project_dir: Optional[Path] = None) -> None:
        self.rule_set = rule_set
        self.project_dir = project_dir

    def match(self, event: FileEvent) -> list[MatchResult]:
        path = normalize_path(event.file_path, self.project_dir)
        results: list[MatchResult] = []
        for rule in self.rule_set:
            if rule.file_triggers is None:
                continue
            try:
                result = self.match_rule(rule, path, event)
            except EvaluationError as exc:
                logger.warning("%s", exc)
                continue
            if result is not None:
                results.append(result)
        return sort_matches(results)

    def match_rule(self, rule: Rule, path: str, event: FileEvent) -> MatchResult | None:
        file_triggers = rule.file_triggers
        if file_triggers is None:
            return None
        if file_triggers.create_only and event.operation != FileOperation.CREATE:
            return None

        path_hit = _first_hit(rule, path_triggers_for(rule), path)
        if path_hit is None:
            return None
        if _first_hit(rule, exclusion_triggers_for(rule), path) is not None:
            logger.debug("Rule %s excluded for %s", rule.name, path)
            return None

        content_triggers = content_triggers_for(rule)
        if not content_triggers:
            return MatchResult(rule=rule, matched_by=MatchSource.PATH_PATTERN, trigger=path_hit.value)
        if event.content is None:
            return None
        content_hit = _first_hit(rule, content_triggers, event.content)
        if content_hit is None:
            return None
        return MatchResult(rule=rule, matched_by=MatchSource.CONTENT_PATTERN, trigger=content_hit.value)


def _first_hit(rule: Rule, triggers: Sequence[Trigger], subject: str) -> Trigger | None:
    for trigger in triggers:
        try:
            if trigger.matches(subject):
                return trigger
        except (ValueError, TypeError, RecursionError) as exc:
            raise EvaluationError(rule.name, f"{trigger!r}: {exc}") from exc
    return None
