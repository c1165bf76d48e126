from enum import Enum

from skill_guard.models import DecisionKind
from skill_guard.rules.models import Enforcement, Priority


class UIStyle(str, Enum):
    BLUE = "blue"
    GREEN = "green"
    YELLOW = "yellow"
    RED = "red"
    CYAN = "cyan"
    MAGENTA = "magenta"
    DIM = "dim"


PRIORITY_STYLE = {
    Priority.CRITICAL: UIStyle.RED.value,
    Priority.HIGH: UIStyle.YELLOW.value,
    Priority.MEDIUM: UIStyle.CYAN.value,
    Priority.LOW: UIStyle.DIM.value,
}

ENFORCEMENT_STYLE = {
    Enforcement.BLOCK: UIStyle.RED.value,
    Enforcement.WARN: UIStyle.YELLOW.value,
    Enforcement.SUGGEST: UIStyle.GREEN.value,
}

DECISION_STYLE = {
    DecisionKind.ALLOW: UIStyle.GREEN.value,
    DecisionKind.DENY: UIStyle.RED.value,
}


def styled(value: str, style: str) -> str:
    return f"[{style}]{value}[/{style}]"
