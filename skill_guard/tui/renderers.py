from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel

from skill_guard.models import FileDecision, PromptAdvisory
from skill_guard.rules.models import RuleSet
from skill_guard.tui.enums import UIStyle
from skill_guard.tui.tables import DecisionTable, MatchTable, RulesTable, SessionTable
from skill_guard.utils import compact_home_path


def section(title: str, body, style: str = UIStyle.BLUE.value, subtitle: Optional[str] = None) -> Panel:
    return Panel(body, title=title, subtitle=subtitle, border_style=style, padding=(0, 1))


class GuardConsoleUI:
    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def render_rules(self, rule_set: RuleSet, source: str) -> None:
        self.console.print(
            section("rules overview", RulesTable.summary_block(rule_set, compact_home_path(source)))
        )
        if len(rule_set):
            self.console.print(
                section("rules", RulesTable.rules_table(rule_set), style=UIStyle.CYAN.value)
            )
        else:
            self.console.print(section("rules", "No rules defined.", style=UIStyle.DIM.value))

    def render_validation(self, rule_set: RuleSet, source: str) -> None:
        self.render_rules(rule_set, source)
        self.console.print(
            section("validate", f"{len(rule_set)} rules valid.", style=UIStyle.GREEN.value)
        )

    def render_prompt_check(self, prompt: str, advisory: PromptAdvisory) -> None:
        self.console.print(section("prompt", escape(prompt), style=UIStyle.BLUE.value))
        if advisory.is_empty:
            self.console.print(section("matches", "No rules matched.", style=UIStyle.DIM.value))
            return
        self.console.print(
            section("matches", MatchTable.matches_table(advisory.matches), style=UIStyle.CYAN.value)
        )

    def render_file_check(self, decision: FileDecision) -> None:
        style = UIStyle.GREEN.value if decision.allowed else UIStyle.RED.value
        self.console.print(section("decision", DecisionTable.decision_block(decision), style=style))
        if decision.message:
            self.console.print(
                section("remediation", escape(decision.message), style=UIStyle.RED.value)
            )
        if decision.advisories:
            self.console.print(
                section(
                    "advisories",
                    MatchTable.matches_table(decision.advisories),
                    style=UIStyle.YELLOW.value,
                )
            )

    def render_session(self, session_id: str, used: set[str]) -> None:
        if not used:
            self.console.print(
                section("session", f"No rules used in session {escape(session_id)}.", style=UIStyle.DIM.value)
            )
            return
        self.console.print(
            section("session", SessionTable.used_rules_table(session_id, used), style=UIStyle.MAGENTA.value)
        )

    def render_session_list(self, sessions: list[str]) -> None:
        if not sessions:
            self.console.print(section("sessions", "No recorded sessions.", style=UIStyle.DIM.value))
            return
        self.console.print(
            section("sessions", SessionTable.sessions_table(sessions), style=UIStyle.MAGENTA.value)
        )

    def render_session_reset(self, session_id: str) -> None:
        self.console.print(
            section("session", f"Reset session {escape(session_id)}.", style=UIStyle.GREEN.value)
        )

    def render_session_marked(self, session_id: str, name: str) -> None:
        self.console.print(
            section(
                "session",
                f"Marked {escape(name)} used in session {escape(session_id)}.",
                style=UIStyle.GREEN.value,
            )
        )
