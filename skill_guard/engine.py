"""Turn rule matches into advisory payloads and allow/deny decisions."""

from __future__ import annotations

import contextlib
import logging
from pathlib import Path
from typing import Mapping, Optional

from skill_guard.matching.files import FileEvent, FileEventMatcher
from skill_guard.matching.prompt import PromptMatcher
from skill_guard.models import DecisionKind, FileDecision, PromptAdvisory, SkippedRule
from skill_guard.rules.models import RuleSet
from skill_guard.session.tracker import SessionStateTracker
from skill_guard.skip import SkipConditionEvaluator

logger = logging.getLogger(__name__)


class DecisionEmitter:
    def __init__(
        self,
        rule_set: RuleSet,
        tracker: Optional[SessionStateTracker] = None,
        env: Optional[Mapping[str, str]] = None,
        project_dir: Optional[Path] = None,
    ) -> None:
        self.rule_set = rule_set
        self.tracker = tracker or SessionStateTracker()
        self.prompt_matcher = PromptMatcher(rule_set)
        self.file_matcher = FileEventMatcher(rule_set, project_dir=project_dir)
        self.skip_evaluator = SkipConditionEvaluator(self.tracker, env=env)

    def evaluate_prompt(self, prompt: str) -> PromptAdvisory:
        matches = self.prompt_matcher.match(prompt)
        if matches:
            logger.info("Prompt matched %s", ", ".join(item.rule.name for item in matches))
        return PromptAdvisory(matches=matches)

    def evaluate_file_event(
        self, session_id: str, event: FileEvent, record: bool = True
    ) -> FileDecision:
        """Decide whether a file edit may proceed.

        The first surviving block rule (critical first, then by name) denies
        the edit and is marked used for the session at that moment. With
        ``record=False`` the session is neither locked nor written.
        """
        matches = self.file_matcher.match(event)
        blocking = [item for item in matches if item.rule.is_blocking]
        advisories = tuple(item for item in matches if not item.rule.is_blocking)

        if not blocking:
            return FileDecision.allow(event.file_path, advisories=advisories)

        skipped: list[SkippedRule] = []
        session_lock = self.tracker.locked(session_id) if record else contextlib.nullcontext()
        with session_lock:
            for match in blocking:
                rule = match.rule
                reason = self.skip_evaluator.skip_reason(rule, session_id, event.content)
                if reason is not None:
                    logger.debug("Skipping %s for %s (%s)", rule.name, event.file_path, reason.value)
                    skipped.append(SkippedRule(name=rule.name, reason=reason))
                    continue
                if record:
                    self.tracker.mark_used(session_id, rule.name)
                logger.info("Blocked %s by %s", event.file_path, rule.name)
                return FileDecision(
                    kind=DecisionKind.DENY,
                    file_path=event.file_path,
                    message=rule.render_remediation(event.file_path),
                    blocked_by=rule.name,
                    skipped=tuple(skipped),
                )

        return FileDecision.allow(
            event.file_path, advisories=advisories, skipped=tuple(skipped)
        )

    def record_skill_use(self, session_id: str, name: str) -> bool:
        if name not in self.rule_set:
            return False
        self.tracker.mark_used(session_id, name)
        return True

