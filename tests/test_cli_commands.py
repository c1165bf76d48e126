from pathlib import Path

import yaml

from skill_guard.__main__ import cli


def _invoke(cli_runner, project_dir: Path, *args: str):
    return cli_runner.invoke(cli, ["--project-dir", str(project_dir), *args])


def test_validate_ok(cli_runner, project_dir, rules_file) -> None:
    result = _invoke(cli_runner, project_dir, "validate")

    assert result.exit_code == 0, result.output
    assert "3 rules valid." in result.output


def test_validate_required_rule_missing(cli_runner, project_dir, rules_file) -> None:
    result = _invoke(cli_runner, project_dir, "validate", "--require", "api-security")

    assert result.exit_code == 1
    assert "missing required rules: api-security" in result.output


def test_validate_block_rule_without_message(cli_runner, project_dir, rules_document, write_json) -> None:
    del rules_document["skills"]["database-verification"]["blockMessage"]
    write_json(project_dir / ".claude" / "skill-rules.json", rules_document)

    result = _invoke(cli_runner, project_dir, "validate")

    assert result.exit_code == 1
    assert "Invalid skill rules" in result.output
    assert "blockMessage" in result.output


def test_validate_missing_document(cli_runner, project_dir) -> None:
    result = _invoke(cli_runner, project_dir, "validate")

    assert result.exit_code == 1
    assert "rules document not found" in result.output


def test_validate_explicit_yaml_path(cli_runner, tmp_path, rules_document) -> None:
    path = tmp_path / "rules.yaml"
    path.write_text(yaml.safe_dump(rules_document), encoding="utf-8")

    result = cli_runner.invoke(cli, ["--rules", str(path), "validate"])

    assert result.exit_code == 0, result.output
    assert "3 rules valid." in result.output


def test_rules_list(cli_runner, project_dir, rules_file) -> None:
    result = _invoke(cli_runner, project_dir, "rules", "list")

    assert result.exit_code == 0, result.output
    for name in ("database-verification", "frontend-dev-guidelines", "xano-sdk-builder"):
        assert name in result.output
    assert "block=1" in result.output


def test_check_prompt(cli_runner, project_dir, rules_file) -> None:
    result = _invoke(cli_runner, project_dir, "check", "prompt", "create a new api for orders")

    assert result.exit_code == 0, result.output
    assert "xano-sdk-builder" in result.output
    assert "intentPattern" in result.output


def test_check_prompt_no_match(cli_runner, project_dir, rules_file) -> None:
    result = _invoke(cli_runner, project_dir, "check", "prompt", "hello")

    assert result.exit_code == 0
    assert "No rules matched." in result.output


def test_check_file_deny_is_dry_run(cli_runner, project_dir, rules_file, tmp_path) -> None:
    content_file = tmp_path / "proposed.ts"
    content_file.write_text("prisma.user.findMany()", encoding="utf-8")
    args = ("check", "file", "services/user.ts", "--content-file", str(content_file), "--session", "s1")

    first = _invoke(cli_runner, project_dir, *args)
    second = _invoke(cli_runner, project_dir, *args)

    assert first.exit_code == 1
    assert "database-verification" in first.output
    assert second.exit_code == 1
    assert not (project_dir / ".claude" / "skill-guard" / "sessions" / "s1.json").exists()


def test_check_file_allow(cli_runner, project_dir, rules_file) -> None:
    result = _invoke(cli_runner, project_dir, "check", "file", "frontend/src/App.tsx")

    assert result.exit_code == 0, result.output
    assert "allow" in result.output
    assert "frontend-dev-guidelines" in result.output


def test_session_mark_show_reset(cli_runner, project_dir, rules_file) -> None:
    marked = _invoke(cli_runner, project_dir, "session", "mark", "s1", "database-verification")
    shown = _invoke(cli_runner, project_dir, "session", "show", "s1")
    reset = _invoke(cli_runner, project_dir, "session", "reset", "s1")
    empty = _invoke(cli_runner, project_dir, "session", "show", "s1")

    assert marked.exit_code == 0, marked.output
    assert "Marked database-verification used in session s1." in marked.output
    assert "database-verification" in shown.output
    assert "Reset session s1." in reset.output
    assert "No rules used in session s1." in empty.output


def test_session_mark_unknown_rule(cli_runner, project_dir, rules_file) -> None:
    result = _invoke(cli_runner, project_dir, "session", "mark", "s1", "nope")

    assert result.exit_code == 1
    assert "Rule not found: nope" in result.output


def test_session_state_dir_option(cli_runner, project_dir, rules_file, tmp_path) -> None:
    state_dir = tmp_path / "state"

    result = cli_runner.invoke(
        cli,
        [
            "--project-dir",
            str(project_dir),
            "--state-dir",
            str(state_dir),
            "session",
            "mark",
            "s1",
            "xano-sdk-builder",
        ],
    )

    assert result.exit_code == 0, result.output
    assert (state_dir / "s1.json").exists()


def test_check_file_leaves_no_session_files(cli_runner, project_dir, rules_file, tmp_path) -> None:
    content_file = tmp_path / "proposed.ts"
    content_file.write_text("new PrismaService()", encoding="utf-8")

    result = _invoke(cli_runner, project_dir, "check", "file", "services/user.ts", "--content-file", str(content_file))

    assert result.exit_code == 1
    assert not (project_dir / ".claude" / "skill-guard").exists()


def test_session_list(cli_runner, project_dir, rules_file) -> None:
    empty = _invoke(cli_runner, project_dir, "session", "list")
    _invoke(cli_runner, project_dir, "session", "mark", "alpha", "xano-sdk-builder")
    _invoke(cli_runner, project_dir, "session", "mark", "beta", "database-verification")
    listed = _invoke(cli_runner, project_dir, "session", "list")

    assert empty.exit_code == 0
    assert "No recorded sessions." in empty.output
    assert listed.exit_code == 0, listed.output
    assert "alpha" in listed.output
    assert "beta" in listed.output
