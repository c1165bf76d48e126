"""Parse, validate and serialize skill rules documents."""

from __future__ import annotations

import json
import re
from enum import Enum
from pathlib import Path
from typing import Any, Iterable, Optional, TypeVar

import yaml

from skill_guard.errors import (
    ConfigError,
    InvalidDocumentFormatError,
    InvalidRulesSchemaError,
    MissingRulesFileError,
)
from skill_guard.matching.globs import compile_glob
from skill_guard.rules.models import (
    Enforcement,
    FileTriggers,
    Priority,
    PromptTriggers,
    Rule,
    RuleKind,
    RuleSet,
    SkipConditions,
)
from skill_guard.rules.schema import RulesSchemaRepository, first_schema_error

YAML_SUFFIXES = (".yaml", ".yml")

E = TypeVar("E", bound=Enum)


def load_rule_set(path: Path, required: Iterable[str] = ()) -> RuleSet:
    if not path.exists():
        raise MissingRulesFileError(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise InvalidDocumentFormatError(path, str(exc)) from exc
    return parse_rule_set(
        read_document(text, yaml_format=path.suffix in YAML_SUFFIXES, source=path),
        source=path,
        required=required,
    )


def read_document(text: str, yaml_format: bool = False, source: Optional[Path] = None) -> Any:
    try:
        if yaml_format:
            return yaml.safe_load(text)
        return json.loads(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise InvalidDocumentFormatError(source, str(exc)) from exc


def parse_rule_set(
    payload: Any,
    source: Optional[Path] = None,
    required: Iterable[str] = (),
    schema_repository: Optional[RulesSchemaRepository] = None,
) -> RuleSet:
    validator = (schema_repository or RulesSchemaRepository()).validator()
    error = first_schema_error(validator, payload)
    if error is not None:
        raise InvalidRulesSchemaError(source, error)

    rules: dict[str, Rule] = {}
    for name, raw in payload["skills"].items():
        rules[str(name)] = parse_rule(str(name), raw, source)

    missing = [name for name in required if name not in rules]
    if missing:
        raise ConfigError(source, "missing required rules: " + ", ".join(missing))

    return RuleSet(version=str(payload["version"]), rules=rules)


def parse_rule(name: str, raw: dict[str, Any], source: Optional[Path] = None) -> Rule:
    if not name.strip():
        raise ConfigError(source, "rule name cannot be empty")

    kind = _parse_enum(RuleKind, raw.get("type", raw.get("kind")), name, "type", source)
    enforcement = _parse_enum(Enforcement, raw["enforcement"], name, "enforcement", source)
    priority = _parse_enum(Priority, raw["priority"], name, "priority", source)

    prompt_triggers = _parse_prompt_triggers(raw.get("promptTriggers"), name, source)
    file_triggers = _parse_file_triggers(raw.get("fileTriggers"), name, source)
    if prompt_triggers is None and file_triggers is None:
        raise ConfigError(source, f"skills.{name} has neither promptTriggers nor fileTriggers")

    message = str(raw.get("blockMessage", raw.get("remediationMessage", "")) or "")
    if enforcement == Enforcement.BLOCK:
        if kind != RuleKind.GUARDRAIL:
            raise ConfigError(source, f"skills.{name} uses enforcement 'block' but is not a guardrail")
        if not message.strip():
            raise ConfigError(source, f"skills.{name} uses enforcement 'block' without blockMessage")

    skip_raw = raw.get("skipConditions") or {}
    skip_conditions = SkipConditions(
        session_skill_used=bool(skip_raw.get("sessionSkillUsed", False)),
        file_markers=tuple(item for item in skip_raw.get("fileMarkers", []) if item),
        env_override=skip_raw.get("envOverride") or None,
    )

    return Rule(
        name=name,
        kind=kind,
        enforcement=enforcement,
        priority=priority,
        prompt_triggers=prompt_triggers,
        file_triggers=file_triggers,
        remediation_message=message,
        skip_conditions=skip_conditions,
        description=str(raw.get("description", "")),
    )


def serialize_rule_set(rule_set: RuleSet) -> dict[str, Any]:
    return {
        "version": rule_set.version,
        "skills": {rule.name: serialize_rule(rule) for rule in rule_set},
    }


def serialize_rule(rule: Rule) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "type": rule.kind.value,
        "enforcement": rule.enforcement.value,
        "priority": rule.priority.value,
    }
    if rule.description:
        payload["description"] = rule.description
    if rule.prompt_triggers is not None:
        payload["promptTriggers"] = {
            "keywords": list(rule.prompt_triggers.keywords),
            "intentPatterns": list(rule.prompt_triggers.intent_patterns),
        }
    if rule.file_triggers is not None:
        payload["fileTriggers"] = {
            "pathPatterns": list(rule.file_triggers.path_patterns),
            "pathExclusions": list(rule.file_triggers.path_exclusions),
            "contentPatterns": list(rule.file_triggers.content_patterns),
            "createOnly": rule.file_triggers.create_only,
        }
    if rule.remediation_message:
        payload["blockMessage"] = rule.remediation_message
    skip = rule.skip_conditions
    if skip != SkipConditions():
        payload["skipConditions"] = {
            "sessionSkillUsed": skip.session_skill_used,
            "fileMarkers": list(skip.file_markers),
        }
        if skip.env_override:
            payload["skipConditions"]["envOverride"] = skip.env_override
    return payload


def dump_rule_set(rule_set: RuleSet, yaml_format: bool = False) -> str:
    payload = serialize_rule_set(rule_set)
    if yaml_format:
        return yaml.safe_dump(payload, default_flow_style=False, sort_keys=False)
    return json.dumps(payload, indent=2) + "\n"


def _parse_enum(enum_type: type[E], value: Any, name: str, field: str, source: Optional[Path]) -> E:
    allowed = ", ".join(item.value for item in enum_type)
    if not isinstance(value, str):
        raise InvalidRulesSchemaError(source, f"skills.{name}.{field} must be one of {allowed}")
    try:
        return enum_type(value.strip().lower())
    except ValueError:
        raise InvalidRulesSchemaError(
            source, f"skills.{name}.{field} '{value}' is not one of {allowed}"
        ) from None


def _parse_prompt_triggers(raw: Any, name: str, source: Optional[Path]) -> PromptTriggers | None:
    if raw is None:
        return None
    keywords = tuple(raw.get("keywords", []))
    intent_patterns = tuple(raw.get("intentPatterns", []))
    if not keywords and not intent_patterns:
        return None
    for keyword in keywords:
        if not keyword.strip():
            raise ConfigError(source, f"skills.{name}.promptTriggers.keywords contains an empty keyword")
    _check_patterns(intent_patterns, name, "promptTriggers.intentPatterns", source)
    return PromptTriggers(keywords=keywords, intent_patterns=intent_patterns)


def _parse_file_triggers(raw: Any, name: str, source: Optional[Path]) -> FileTriggers | None:
    if raw is None:
        return None
    path_patterns = tuple(raw.get("pathPatterns", []))
    path_exclusions = tuple(raw.get("pathExclusions", []))
    content_patterns = tuple(raw.get("contentPatterns", []))

    if not path_patterns:
        raise ConfigError(source, f"skills.{name}.fileTriggers.pathPatterns cannot be empty")
    _check_globs(path_patterns, name, "fileTriggers.pathPatterns", source)
    _check_globs(path_exclusions, name, "fileTriggers.pathExclusions", source)
    _check_patterns(content_patterns, name, "fileTriggers.contentPatterns", source)

    return FileTriggers(
        path_patterns=path_patterns,
        path_exclusions=path_exclusions,
        content_patterns=content_patterns,
        create_only=bool(raw.get("createOnly", False)),
    )


def _check_patterns(patterns: tuple[str, ...], name: str, field: str, source: Optional[Path]) -> None:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigError(source, f"skills.{name}.{field} '{pattern}' does not compile ({exc})") from exc


def _check_globs(patterns: tuple[str, ...], name: str, field: str, source: Optional[Path]) -> None:
    for pattern in patterns:
        try:
            compile_glob(pattern)
        except (ValueError, re.error) as exc:
            raise ConfigError(source, f"skills.{name}.{field} '{pattern}' is invalid ({exc})") from exc
