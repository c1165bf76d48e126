from __future__ import annotations

import logging

from skill_guard.errors import EvaluationError
from skill_guard.matching.triggers import prompt_triggers_for
from skill_guard.rules.models import MatchResult, Rule, RuleSet, sort_matches

logger = logging.getLogger(__name__)


class PromptMatcher:
    """Match free-text prompts against keyword and intent triggers."""

    def __init__(self, rule_set: RuleSet) -> None:
        self.rule_set = rule_set

    def match(self, prompt: str) -> list[MatchResult]:
        if not prompt or not prompt.strip():
            return []

        results: list[MatchResult] = []
        for rule in self.rule_set:
            if rule.prompt_triggers is None:
                continue
            try:
                result = self.match_rule(rule, prompt)
            except EvaluationError as exc:
                logger.warning("%s", exc)
                continue
            if result is not None:
                results.append(result)
        return sort_matches(results)

    @staticmethod
    def match_rule(rule: Rule, prompt: str) -> MatchResult | None:
        for trigger in prompt_triggers_for(rule):
            try:
                hit = trigger.matches(prompt)
            except (ValueError, TypeError, RecursionError) as exc:
                raise EvaluationError(rule.name, f"{trigger!r}: {exc}") from exc
            if hit:
                return MatchResult(rule=rule, matched_by=trigger.source, trigger=trigger.value)
        return None
