"""End-to-end decision scenarios for prompts and file edits."""

from skill_guard.engine import DecisionEmitter
from skill_guard.matching.files import FileEvent
from skill_guard.models import DecisionKind
from skill_guard.rules.models import Priority
from skill_guard.rules.parser import parse_rule_set, serialize_rule_set
from skill_guard.session.store import FileSessionStore
from skill_guard.session.tracker import SessionStateTracker
from skill_guard.skip import SkipReason

PRISMA_CONTENT = "import { PrismaService } from '../prisma';\n"


def _emitter(rule_set, env=None, tracker=None) -> DecisionEmitter:
    return DecisionEmitter(rule_set, tracker=tracker or SessionStateTracker(), env=env or {})


def test_edit_with_prisma_content_is_denied(rule_set) -> None:
    emitter = _emitter(rule_set)

    decision = emitter.evaluate_file_event("s1", FileEvent("services/user.ts", content=PRISMA_CONTENT))

    assert decision.kind == DecisionKind.DENY
    assert decision.exit_code == 2
    assert decision.blocked_by == "database-verification"
    assert "services/user.ts" in decision.message
    assert "{file_path}" not in decision.message


def test_excluded_test_file_is_allowed(rule_set) -> None:
    decision = _emitter(rule_set).evaluate_file_event(
        "s1", FileEvent("services/user.test.ts", content=PRISMA_CONTENT)
    )

    assert decision.allowed
    assert decision.exit_code == 0
    assert decision.message == ""


def test_second_edit_in_session_is_allowed(rule_set) -> None:
    tracker = SessionStateTracker()
    emitter = _emitter(rule_set, tracker=tracker)
    event = FileEvent("services/user.ts", content=PRISMA_CONTENT)

    first = emitter.evaluate_file_event("s1", event)
    second = emitter.evaluate_file_event("s1", event)
    other_session = emitter.evaluate_file_event("s2", event)

    assert first.kind == DecisionKind.DENY
    assert tracker.was_used("s1", "database-verification")
    assert second.allowed
    assert second.message == ""
    assert [item.reason for item in second.skipped] == [SkipReason.SESSION_SKILL_USED]
    assert other_session.kind == DecisionKind.DENY


def test_env_override_allows(rule_set) -> None:
    emitter = _emitter(rule_set, env={"SKIP_DB_VERIFICATION": "1"})

    decision = emitter.evaluate_file_event("s1", FileEvent("services/user.ts", content=PRISMA_CONTENT))

    assert decision.allowed
    assert [item.reason for item in decision.skipped] == [SkipReason.ENV_OVERRIDE]


def test_session_and_marker_both_satisfied_allows(rule_set) -> None:
    tracker = SessionStateTracker()
    tracker.mark_used("s1", "database-verification")
    content = "// @skip-validation\n" + PRISMA_CONTENT

    decision = _emitter(rule_set, tracker=tracker).evaluate_file_event(
        "s1", FileEvent("services/user.ts", content=content)
    )

    assert decision.allowed
    assert len(decision.skipped) == 1


def test_skipped_block_does_not_mark_used(rule_set) -> None:
    tracker = SessionStateTracker()
    emitter = _emitter(rule_set, tracker=tracker)

    emitter.evaluate_file_event(
        "s1", FileEvent("services/user.ts", content="// @skip-validation\n" + PRISMA_CONTENT)
    )

    assert not tracker.was_used("s1", "database-verification")


def test_dry_run_does_not_mark_used(rule_set) -> None:
    tracker = SessionStateTracker()
    emitter = _emitter(rule_set, tracker=tracker)
    event = FileEvent("services/user.ts", content=PRISMA_CONTENT)

    assert emitter.evaluate_file_event("s1", event, record=False).kind == DecisionKind.DENY
    assert emitter.evaluate_file_event("s1", event, record=False).kind == DecisionKind.DENY
    assert not tracker.was_used("s1", "database-verification")


def test_suggest_matches_are_advisory(rule_set) -> None:
    decision = _emitter(rule_set).evaluate_file_event("s1", FileEvent("frontend/src/App.tsx"))

    assert decision.allowed
    assert [item.rule.name for item in decision.advisories] == ["frontend-dev-guidelines"]


def test_multiple_block_rules_pick_priority_then_name(rules_document) -> None:
    base = rules_document["skills"]["database-verification"]
    for name, priority in (("aa-high", "high"), ("zz-critical", "critical")):
        rule = dict(base)
        rule["priority"] = priority
        rule["blockMessage"] = f"{name}: {{file_path}}"
        rules_document["skills"][name] = rule
    rule_set = parse_rule_set(rules_document)
    tracker = SessionStateTracker()

    decision = _emitter(rule_set, tracker=tracker).evaluate_file_event(
        "s1", FileEvent("services/user.ts", content=PRISMA_CONTENT)
    )

    assert decision.blocked_by == "database-verification"
    assert tracker.used_rules("s1") == {"database-verification"}

    follow_up = _emitter(rule_set, tracker=tracker).evaluate_file_event(
        "s1", FileEvent("services/user.ts", content=PRISMA_CONTENT)
    )
    assert follow_up.blocked_by == "zz-critical"
    assert follow_up.message == "zz-critical: services/user.ts"


def test_prompt_advisory_groups_by_priority(rule_set) -> None:
    advisory = _emitter(rule_set).evaluate_prompt("how do I add a new xano endpoint")

    assert advisory.rule_names == ["xano-sdk-builder"]
    assert list(advisory.groups()) == [Priority.HIGH]
    assert advisory.blocking is False
    assert advisory.as_dict() == {"skills": [{"name": "xano-sdk-builder", "priority": "high"}]}


def test_prompt_for_block_rule_stays_advisory(rule_set) -> None:
    advisory = _emitter(rule_set).evaluate_prompt("update the database schema")

    assert advisory.rule_names == ["database-verification"]
    assert advisory.blocking is False


def test_unrelated_prompt_is_empty(rule_set) -> None:
    advisory = _emitter(rule_set).evaluate_prompt("what's the weather today")

    assert advisory.is_empty


def test_record_skill_use(rule_set) -> None:
    tracker = SessionStateTracker()
    emitter = _emitter(rule_set, tracker=tracker)

    assert emitter.record_skill_use("s1", "database-verification") is True
    assert emitter.record_skill_use("s1", "unknown-skill") is False
    assert tracker.used_rules("s1") == {"database-verification"}


def test_reloaded_rule_set_matches_identically(rule_set) -> None:
    reloaded = parse_rule_set(serialize_rule_set(rule_set))
    cases = [
        ("services/user.ts", PRISMA_CONTENT),
        ("services/user.test.ts", PRISMA_CONTENT),
        ("frontend/src/App.tsx", None),
    ]
    prompts = ["add a xano endpoint", "react component", "weather"]

    for path, content in cases:
        original = _emitter(rule_set).evaluate_file_event("s", FileEvent(path, content=content), record=False)
        again = _emitter(reloaded).evaluate_file_event("s", FileEvent(path, content=content), record=False)
        assert original == again
    for text in prompts:
        assert _emitter(rule_set).evaluate_prompt(text).rule_names == _emitter(reloaded).evaluate_prompt(text).rule_names


def test_dry_run_takes_no_store_lock(rule_set, tmp_path) -> None:
    state_dir = tmp_path / "sessions"
    emitter = _emitter(rule_set, tracker=SessionStateTracker(FileSessionStore(state_dir)))

    decision = emitter.evaluate_file_event(
        "s1", FileEvent("services/user.ts", content=PRISMA_CONTENT), record=False
    )

    assert decision.kind == DecisionKind.DENY
    assert decision.exit_code == 2
    assert not state_dir.exists()
