from collections import Counter

from rich.markup import escape
from rich.table import Column, Table

from skill_guard.models import FileDecision
from skill_guard.rules.models import MatchResult, Rule, RuleSet
from skill_guard.tui.enums import (
    DECISION_STYLE,
    ENFORCEMENT_STYLE,
    PRIORITY_STYLE,
    UIStyle,
    styled,
)


def _trigger_summary(rule: Rule) -> str:
    parts: list[str] = []
    if rule.prompt_triggers is not None:
        parts.append(f"keywords={len(rule.prompt_triggers.keywords)}")
        parts.append(f"intents={len(rule.prompt_triggers.intent_patterns)}")
    if rule.file_triggers is not None:
        parts.append(f"paths={len(rule.file_triggers.path_patterns)}")
        if rule.file_triggers.path_exclusions:
            parts.append(f"exclusions={len(rule.file_triggers.path_exclusions)}")
        if rule.file_triggers.content_patterns:
            parts.append(f"content={len(rule.file_triggers.content_patterns)}")
        if rule.file_triggers.create_only:
            parts.append("create-only")
    return "  ".join(parts)


class RulesTable:
    @staticmethod
    def summary_block(rule_set: RuleSet, source: str):
        counts = Counter(rule.enforcement.value for rule in rule_set)
        chips = [f"{key}={value}" for key, value in sorted(counts.items())] or ["none"]

        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("Source", escape(source))
        table.add_row("Version", rule_set.version)
        table.add_row("Rules", str(len(rule_set)))
        table.add_row("Enforcement", "  ".join(chips))
        return table

    @staticmethod
    def rules_table(rule_set: RuleSet) -> Table:
        table = Table(
            Column(header="Rule", overflow="fold"),
            Column(header="Type", width=10),
            Column(header="Enforcement", width=12),
            Column(header="Priority", width=10),
            Column(header="Triggers", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for rule in rule_set.get_all():
            table.add_row(
                escape(rule.name),
                rule.kind.value,
                styled(rule.enforcement.value, ENFORCEMENT_STYLE[rule.enforcement]),
                styled(rule.priority.value, PRIORITY_STYLE[rule.priority]),
                _trigger_summary(rule),
            )
        return table


class MatchTable:
    @staticmethod
    def matches_table(matches: list[MatchResult] | tuple[MatchResult, ...]) -> Table:
        table = Table(
            Column(header="Rule", overflow="fold"),
            Column(header="Priority", width=10),
            Column(header="Enforcement", width=12),
            Column(header="Matched by", width=15),
            Column(header="Trigger", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for item in matches:
            rule = item.rule
            table.add_row(
                escape(rule.name),
                styled(rule.priority.value, PRIORITY_STYLE[rule.priority]),
                styled(rule.enforcement.value, ENFORCEMENT_STYLE[rule.enforcement]),
                item.matched_by.value,
                escape(item.trigger),
            )
        return table


class DecisionTable:
    @staticmethod
    def decision_block(decision: FileDecision):
        table = Table.grid(padding=(0, 2))
        table.add_column(style="bold")
        table.add_column()
        table.add_row("File", escape(decision.file_path))
        table.add_row(
            "Decision",
            styled(decision.kind.value, DECISION_STYLE[decision.kind]),
        )
        if decision.blocked_by:
            table.add_row("Blocked by", escape(decision.blocked_by))
        if decision.skipped:
            skipped = ", ".join(f"{item.name} ({item.reason.value})" for item in decision.skipped)
            table.add_row("Skipped", styled(escape(skipped), UIStyle.YELLOW.value))
        return table


class SessionTable:
    @staticmethod
    def used_rules_table(session_id: str, used: set[str]) -> Table:
        table = Table(
            Column(header="Session", overflow="fold"),
            Column(header="Used rule", overflow="fold"),
            expand=True,
            header_style="bold",
        )
        for name in sorted(used):
            table.add_row(escape(session_id), escape(name))
        return table

    @staticmethod
    def sessions_table(sessions: list[str]) -> Table:
        table = Table(Column(header="Session", overflow="fold"), expand=True, header_style="bold")
        for session_id in sessions:
            table.add_row(escape(session_id))
        return table
