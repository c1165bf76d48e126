import json

from skill_guard.models import FileDecision, PromptAdvisory
from skill_guard.rules.models import Enforcement, Priority

RULE_LINE = "━" * 39

PRIORITY_HEADINGS: dict[Priority, str] = {
    Priority.CRITICAL: "⚠️ CRITICAL SKILLS (REQUIRED):",
    Priority.HIGH: "📚 RECOMMENDED SKILLS:",
    Priority.MEDIUM: "💡 SUGGESTED SKILLS:",
    Priority.LOW: "📌 OPTIONAL SKILLS:",
}


def render_prompt_advisory(advisory: PromptAdvisory) -> str:
    if advisory.is_empty:
        return ""
    lines = [RULE_LINE, "🎯 SKILL ACTIVATION CHECK", RULE_LINE, ""]
    for priority, matches in advisory.groups().items():
        lines.append(PRIORITY_HEADINGS[priority])
        lines.extend(f"  → {item.rule.name}" for item in matches)
        lines.append("")
    lines.append("ACTION: Use Skill tool BEFORE responding")
    lines.append(RULE_LINE)
    return "\n".join(lines)


def render_prompt_hook_json(advisory: PromptAdvisory) -> str:
    if advisory.is_empty:
        return json.dumps({})
    return json.dumps(
        {
            "hookSpecificOutput": {
                "hookEventName": "UserPromptSubmit",
                "additionalContext": render_prompt_advisory(advisory),
            }
        }
    )


def render_file_advisory(decision: FileDecision) -> str:
    if not decision.allowed or not decision.advisories:
        return ""
    lines = [f"💡 Skills relevant to {decision.file_path}:"]
    for item in decision.advisories:
        suffix = " [warning]" if item.rule.enforcement == Enforcement.WARN else ""
        lines.append(f"  → {item.rule.name} ({item.rule.priority.value}){suffix}")
    return "\n".join(lines)
