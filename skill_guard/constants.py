from typing import Final


RULES_FILENAME: Final[str] = "skill-rules.json"
CLAUDE_DIRNAME: Final[str] = ".claude"
STATE_DIRNAME: Final[str] = "skill-guard"
SESSIONS_DIRNAME: Final[str] = "sessions"

ENV_RULES_PATH: Final[str] = "SKILL_GUARD_RULES"
ENV_STATE_DIR: Final[str] = "SKILL_GUARD_STATE_DIR"
ENV_LOG_LEVEL: Final[str] = "SKILL_GUARD_LOG_LEVEL"
ENV_LOG_FILE: Final[str] = "SKILL_GUARD_LOG_FILE"
ENV_PLUGIN_ROOT: Final[str] = "CLAUDE_PLUGIN_ROOT"
ENV_PROJECT_DIR: Final[str] = "CLAUDE_PROJECT_DIR"

ALLOW_EXIT_CODE: Final[int] = 0
DENY_EXIT_CODE: Final[int] = 2

FILE_PATH_PLACEHOLDER: Final[str] = "{file_path}"

MAX_CONTENT_CHARS: Final[int] = 1_000_000

FILE_MUTATING_TOOLS: Final[tuple[str, ...]] = (
    "Write",
    "Edit",
    "MultiEdit",
    "NotebookEdit",
)
SKILL_TOOL: Final[str] = "Skill"

FALSY_ENV_VALUES: Final[tuple[str, ...]] = ("", "0", "false", "no", "off")
