from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from skill_guard.constants import ALLOW_EXIT_CODE, DENY_EXIT_CODE
from skill_guard.rules.models import PRIORITY_ORDER, MatchResult, Priority
from skill_guard.skip import SkipReason


class DecisionKind(str, Enum):
    ALLOW = "allow"
    DENY = "deny"


@dataclass(frozen=True)
class PromptAdvisory:
    matches: list[MatchResult] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.matches

    @property
    def blocking(self) -> bool:
        return False

    @property
    def rule_names(self) -> list[str]:
        return [item.rule.name for item in self.matches]

    def groups(self) -> dict[Priority, list[MatchResult]]:
        grouped: dict[Priority, list[MatchResult]] = {}
        for priority in PRIORITY_ORDER:
            items = [item for item in self.matches if item.rule.priority == priority]
            if items:
                grouped[priority] = items
        return grouped

    def as_dict(self) -> dict:
        return {
            "skills": [
                {"name": item.rule.name, "priority": item.rule.priority.value}
                for item in self.matches
            ]
        }


@dataclass(frozen=True)
class SkippedRule:
    name: str
    reason: SkipReason


@dataclass(frozen=True)
class FileDecision:
    kind: DecisionKind
    file_path: str
    message: str = ""
    blocked_by: Optional[str] = None
    advisories: tuple[MatchResult, ...] = ()
    skipped: tuple[SkippedRule, ...] = ()

    @property
    def allowed(self) -> bool:
        return self.kind == DecisionKind.ALLOW

    @property
    def exit_code(self) -> int:
        return ALLOW_EXIT_CODE if self.allowed else DENY_EXIT_CODE

    @classmethod
    def allow(
        cls,
        file_path: str,
        advisories: tuple[MatchResult, ...] = (),
        skipped: tuple[SkippedRule, ...] = (),
    ) -> "FileDecision":
        return cls(
            kind=DecisionKind.ALLOW,
            file_path=file_path,
            advisories=advisories,
            skipped=skipped,
        )
