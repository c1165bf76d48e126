"""Trigger variants evaluated through a single ``matches`` capability."""

from __future__ import annotations

import functools
import re
from abc import ABC, abstractmethod
from typing import ClassVar

from skill_guard.constants import MAX_CONTENT_CHARS
from skill_guard.matching.globs import compile_glob
from skill_guard.rules.models import MatchSource, Rule


@functools.lru_cache(maxsize=1024)
def compile_pattern(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern)


class Trigger(ABC):
    SOURCE: ClassVar[MatchSource]

    def __init__(self, value: str) -> None:
        self.value = value

    @property
    def source(self) -> MatchSource:
        return self.SOURCE

    @abstractmethod
    def matches(self, subject: str) -> bool:
        """Return True when the subject satisfies this trigger."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.value!r})"


class KeywordTrigger(Trigger):
    SOURCE = MatchSource.KEYWORD

    def __init__(self, value: str) -> None:
        super().__init__(value)
        self._needle = value.lower()

    def matches(self, subject: str) -> bool:
        return self._needle in subject.lower()


class IntentPatternTrigger(Trigger):
    SOURCE = MatchSource.INTENT_PATTERN

    def matches(self, subject: str) -> bool:
        return compile_pattern(self.value).search(subject) is not None


class PathPatternTrigger(Trigger):
    SOURCE = MatchSource.PATH_PATTERN

    def matches(self, subject: str) -> bool:
        return compile_glob(self.value).fullmatch(subject) is not None


class ContentPatternTrigger(Trigger):
    SOURCE = MatchSource.CONTENT_PATTERN

    def matches(self, subject: str) -> bool:
        if len(subject) > MAX_CONTENT_CHARS:
            raise ValueError(
                f"content exceeds {MAX_CONTENT_CHARS} characters ({len(subject)})"
            )
        return compile_pattern(self.value).search(subject) is not None


@functools.lru_cache(maxsize=512)
def prompt_triggers_for(rule: Rule) -> tuple[Trigger, ...]:
    if rule.prompt_triggers is None:
        return ()
    triggers: list[Trigger] = [
        KeywordTrigger(item) for item in rule.prompt_triggers.keywords
    ]
    triggers.extend(
        IntentPatternTrigger(item) for item in rule.prompt_triggers.intent_patterns
    )
    return tuple(triggers)


@functools.lru_cache(maxsize=512)
def path_triggers_for(rule: Rule) -> tuple[PathPatternTrigger, ...]:
    if rule.file_triggers is None:
        return ()
    return tuple(PathPatternTrigger(item) for item in rule.file_triggers.path_patterns)


@functools.lru_cache(maxsize=512)
def exclusion_triggers_for(rule: Rule) -> tuple[PathPatternTrigger, ...]:
    if rule.file_triggers is None:
        return ()
    return tuple(
        PathPatternTrigger(item) for item in rule.file_triggers.path_exclusions
    )


@functools.lru_cache(maxsize=512)
def content_triggers_for(rule: Rule) -> tuple[ContentPatternTrigger, ...]:
    if rule.file_triggers is None:
        return ()
    return tuple(
        ContentPatternTrigger(item) for item in rule.file_triggers.content_patterns
    )
