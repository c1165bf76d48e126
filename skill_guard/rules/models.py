"""Rule data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Iterator, Optional

from skill_guard.constants import FILE_PATH_PLACEHOLDER


class RuleKind(str, Enum):
    GUARDRAIL = "guardrail"
    DOMAIN = "domain"


class Enforcement(str, Enum):
    BLOCK = "block"
    SUGGEST = "suggest"
    WARN = "warn"


class Priority(str, Enum):
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        return PRIORITY_ORDER.index(self)


PRIORITY_ORDER: tuple[Priority, ...] = (
    Priority.CRITICAL,
    Priority.HIGH,
    Priority.MEDIUM,
    Priority.LOW,
)


class MatchSource(str, Enum):
    KEYWORD = "keyword"
    INTENT_PATTERN = "intentPattern"
    PATH_PATTERN = "pathPattern"
    CONTENT_PATTERN = "contentPattern"


class FileOperation(str, Enum):
    CREATE = "create"
    MODIFY = "modify"


@dataclass(frozen=True)
class PromptTriggers:
    keywords: tuple[str, ...] = ()
    intent_patterns: tuple[str, ...] = ()


@dataclass(frozen=True)
class FileTriggers:
    path_patterns: tuple[str, ...]
    path_exclusions: tuple[str, ...] = ()
    content_patterns: tuple[str, ...] = ()
    create_only: bool = False


@dataclass(frozen=True)
class SkipConditions:
    session_skill_used: bool = False
    file_markers: tuple[str, ...] = ()
    env_override: Optional[str] = None


@dataclass(frozen=True)
class Rule:
    name: str
    kind: RuleKind
    enforcement: Enforcement
    priority: Priority
    prompt_triggers: Optional[PromptTriggers] = None
    file_triggers: Optional[FileTriggers] = None
    remediation_message: str = ""
    skip_conditions: SkipConditions = field(default_factory=SkipConditions)
    description: str = ""

    @property
    def is_blocking(self) -> bool:
        return self.enforcement == Enforcement.BLOCK

    @property
    def sort_key(self) -> tuple[int, str]:
        return (self.priority.rank, self.name)

    def render_remediation(self, file_path: str) -> str:
        return self.remediation_message.replace(FILE_PATH_PLACEHOLDER, file_path)


@dataclass(frozen=True)
class RuleSet:
    version: str
    rules: dict[str, Rule] = field(default_factory=dict)

    def get_all(self) -> list[Rule]:
        return list(self.rules.values())

    def get(self, name: str) -> Rule | None:
        return self.rules.get(name)

    @property
    def names(self) -> list[str]:
        return list(self.rules.keys())

    def __contains__(self, name: object) -> bool:
        return name in self.rules

    def __iter__(self) -> Iterator[Rule]:
        return iter(self.rules.values())

    def __len__(self) -> int:
        return len(self.rules)


@dataclass(frozen=True)
class MatchResult:
    rule: Rule
    matched_by: MatchSource
    trigger: str


def sort_matches(matches: Iterable[MatchResult]) -> list[MatchResult]:
    """Order matches critical-first, then by rule name."""
    return sorted(matches, key=lambda item: item.rule.sort_key)
