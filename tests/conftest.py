import copy
import json
import logging
import sys
from pathlib import Path
from typing import Any

from click.testing import CliRunner
import pytest


def _ensure_repo_on_path() -> None:
    repo_root = Path(__file__).resolve().parent.parent
    if str(repo_root) not in sys.path:
        sys.path.insert(0, str(repo_root))


_ensure_repo_on_path()

from skill_guard.rules.models import RuleSet  # noqa: E402
from skill_guard.rules.parser import parse_rule_set  # noqa: E402
from skill_guard.rules.repository import clear_rules_cache  # noqa: E402


SAMPLE_RULES: dict[str, Any] = {
    "version": "1.0",
    "skills": {
        "database-verification": {
            "type": "guardrail",
            "enforcement": "block",
            "priority": "critical",
            "promptTriggers": {"keywords": ["prisma", "database"]},
            "fileTriggers": {
                "pathPatterns": ["**/*.ts"],
                "pathExclusions": ["**/*.test.ts"],
                "contentPatterns": ["PrismaService", "prisma\\."],
            },
            "blockMessage": (
                "BLOCKED - Database Operation Detected\n"
                "File: {file_path}\n"
                "Use Skill tool: 'database-verification'"
            ),
            "skipConditions": {
                "sessionSkillUsed": True,
                "fileMarkers": ["@skip-validation"],
                "envOverride": "SKIP_DB_VERIFICATION",
            },
        },
        "frontend-dev-guidelines": {
            "type": "domain",
            "enforcement": "suggest",
            "priority": "medium",
            "promptTriggers": {"keywords": ["react", "component"]},
            "fileTriggers": {"pathPatterns": ["frontend/src/**/*.tsx"]},
        },
        "xano-sdk-builder": {
            "type": "domain",
            "enforcement": "suggest",
            "priority": "high",
            "promptTriggers": {
                "keywords": ["xano", "endpoint"],
                "intentPatterns": ["(create|add).*?api"],
            },
        },
    },
}

CLAUDE_ENV_VARS = (
    "CLAUDE_PROJECT_DIR",
    "CLAUDE_PLUGIN_ROOT",
    "SKILL_GUARD_RULES",
    "SKILL_GUARD_STATE_DIR",
    "SKILL_GUARD_LOG_LEVEL",
    "SKILL_GUARD_LOG_FILE",
    "SKIP_DB_VERIFICATION",
)


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.setattr(Path, "home", lambda: tmp_path)
    for name in CLAUDE_ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture(autouse=True)
def fresh_state():
    clear_rules_cache()
    yield
    clear_rules_cache()
    logger = logging.getLogger("skill_guard")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True


@pytest.fixture
def write_json():
    def _write(path: Path, payload: dict) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload), encoding="utf-8")

    return _write


@pytest.fixture
def rules_document() -> dict[str, Any]:
    return copy.deepcopy(SAMPLE_RULES)


@pytest.fixture
def rule_set(rules_document: dict[str, Any]) -> RuleSet:
    return parse_rule_set(rules_document)


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    path = tmp_path / "project"
    path.mkdir()
    return path


@pytest.fixture
def rules_file(project_dir: Path, rules_document: dict[str, Any], write_json) -> Path:
    path = project_dir / ".claude" / "skill-rules.json"
    write_json(path, rules_document)
    return path


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner(env={"COLUMNS": "200"})
