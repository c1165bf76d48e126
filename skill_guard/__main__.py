import logging
import sys
from pathlib import Path
from typing import Optional

import click
from rich.console import Console

from skill_guard.config import Settings
from skill_guard.constants import (
    ENV_LOG_FILE,
    ENV_LOG_LEVEL,
    ENV_PLUGIN_ROOT,
    ENV_PROJECT_DIR,
    ENV_RULES_PATH,
    ENV_STATE_DIR,
)
from skill_guard.engine import DecisionEmitter
from skill_guard.errors import ConfigError, MissingRulesFileError, SkillGuardError
from skill_guard.hooks.events import (
    PromptSubmitEvent,
    ToolUseEvent,
    build_file_event,
    read_payload,
)
from skill_guard.hooks.render import (
    render_file_advisory,
    render_prompt_advisory,
    render_prompt_hook_json,
)
from skill_guard.logs import LOG_LEVELS, configure_logging
from skill_guard.matching.files import FileEvent
from skill_guard.rules.models import FileOperation, RuleSet
from skill_guard.session.tracker import SessionStateTracker
from skill_guard.tui import GuardConsoleUI
from skill_guard.utils import read_text_safe

logger = logging.getLogger(__name__)

_path_type = click.Path(path_type=Path)


def _load_rules(settings: Settings) -> tuple[RuleSet, Path]:
    repository = settings.rules_repository()
    try:
        path = repository.resolve()
        return repository.load(), path
    except ConfigError as exc:
        raise click.ClickException(str(exc))


def _tracker(settings: Settings) -> SessionStateTracker:
    return SessionStateTracker(settings.session_store())


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option("--rules", "rules_path", type=_path_type, envvar=ENV_RULES_PATH, help="Rules document path.")
@click.option("--plugin-root", type=_path_type, envvar=ENV_PLUGIN_ROOT, help="Plugin root holding skill-rules.json.")
@click.option("--project-dir", type=_path_type, envvar=ENV_PROJECT_DIR, help="Project root for rules and state.")
@click.option("--state-dir", type=_path_type, envvar=ENV_STATE_DIR, help="Directory for session state files.")
@click.option(
    "--log-level",
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    default="WARNING",
    envvar=ENV_LOG_LEVEL,
)
@click.option("--log-file", type=_path_type, envvar=ENV_LOG_FILE)
@click.pass_context
def cli(
    ctx: click.Context,
    rules_path: Optional[Path],
    plugin_root: Optional[Path],
    project_dir: Optional[Path],
    state_dir: Optional[Path],
    log_level: str,
    log_file: Optional[Path],
) -> None:
    """Skill activation and guardrail hooks."""
    configure_logging(log_level, log_file)
    ctx.obj = Settings(
        rules_path=rules_path,
        plugin_root=plugin_root,
        project_dir=project_dir,
        state_dir=state_dir,
        log_level=log_level,
        log_file=log_file,
    )


@cli.command(help="UserPromptSubmit hook: suggest skills for the prompt on stdin.")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json"], case_sensitive=False),
    default="text",
)
@click.pass_obj
def prompt(settings: Settings, output_format: str) -> None:
    try:
        event = PromptSubmitEvent.from_payload(read_payload(sys.stdin))
        scoped = settings.with_cwd(event.cwd)
        rule_set = scoped.rules_repository().load()
    except MissingRulesFileError as exc:
        logger.debug("Prompt hook idle: %s", exc)
        return
    except SkillGuardError as exc:
        logger.warning("Prompt hook skipped: %s", exc)
        return

    advisory = DecisionEmitter(rule_set).evaluate_prompt(event.prompt)
    if output_format.lower() == "json":
        click.echo(render_prompt_hook_json(advisory))
        return
    output = render_prompt_advisory(advisory)
    if output:
        click.echo(output)


@cli.command(help="PreToolUse hook: allow or deny the file edit on stdin.")
@click.pass_obj
def guard(settings: Settings) -> None:
    try:
        event = ToolUseEvent.from_payload(read_payload(sys.stdin))
        scoped = settings.with_cwd(event.cwd)
        if event.skill_name is None and not event.is_file_mutation:
            return
        rule_set = scoped.rules_repository().load()
    except MissingRulesFileError as exc:
        logger.debug("Guard hook idle: %s", exc)
        return
    except SkillGuardError as exc:
        logger.warning("Guard hook skipped: %s", exc)
        return

    project_dir = scoped.resolved_project_dir()
    emitter = DecisionEmitter(rule_set, tracker=_tracker(scoped), project_dir=project_dir)

    if event.skill_name is not None:
        if emitter.record_skill_use(event.session_id, event.skill_name):
            logger.info("Skill %s used in session %s", event.skill_name, event.session_id)
        return

    base_dir = Path(event.cwd) if event.cwd else project_dir
    decision = emitter.evaluate_file_event(event.session_id, build_file_event(event, base_dir))
    if not decision.allowed:
        click.echo(decision.message, err=True)
        raise click.exceptions.Exit(decision.exit_code)

    advisory = render_file_advisory(decision)
    if advisory:
        click.echo(advisory)


@cli.command(help="Validate the rules document.")
@click.option("--require", "required", multiple=True, help="Rule name that must be defined.")
@click.pass_obj
def validate(settings: Settings, required: tuple[str, ...]) -> None:
    ui = GuardConsoleUI(Console())
    repository = settings.rules_repository()
    try:
        path = repository.resolve()
        rule_set = repository.load(required=required)
    except ConfigError as exc:
        raise click.ClickException(str(exc))
    ui.render_validation(rule_set, str(path))


@cli.group(help="Inspect configured rules.")
def rules() -> None:
    pass


@rules.command("list", help="List rules with their triggers.")
@click.pass_obj
def rules_list(settings: Settings) -> None:
    ui = GuardConsoleUI(Console())
    rule_set, path = _load_rules(settings)
    ui.render_rules(rule_set, str(path))


@cli.group(help="Dry-run rule evaluation without touching session state.")
def check() -> None:
    pass


@check.command("prompt", help="Show which rules a prompt would surface.")
@click.argument("text")
@click.pass_obj
def check_prompt(settings: Settings, text: str) -> None:
    ui = GuardConsoleUI(Console())
    rule_set, _ = _load_rules(settings)
    ui.render_prompt_check(text, DecisionEmitter(rule_set).evaluate_prompt(text))


@check.command("file", help="Show the decision for editing a file.")
@click.argument("path")
@click.option("--content-file", type=click.Path(path_type=Path, exists=True, dir_okay=False))
@click.option("--create", is_flag=True, help="Treat the edit as a file creation.")
@click.option("--session", "session_id", default="check", show_default=True)
@click.pass_obj
def check_file(
    settings: Settings,
    path: str,
    content_file: Optional[Path],
    create: bool,
    session_id: str,
) -> None:
    ui = GuardConsoleUI(Console())
    rule_set, _ = _load_rules(settings)
    project_dir = settings.resolved_project_dir()

    if content_file is not None:
        content = read_text_safe(content_file)
    else:
        disk_path = Path(path) if Path(path).is_absolute() else project_dir / path
        content = read_text_safe(disk_path)

    emitter = DecisionEmitter(rule_set, tracker=_tracker(settings), project_dir=project_dir)
    event = FileEvent(
        file_path=path,
        operation=FileOperation.CREATE if create else FileOperation.MODIFY,
        content=content,
    )
    decision = emitter.evaluate_file_event(session_id, event, record=False)
    ui.render_file_check(decision)
    if not decision.allowed:
        raise click.exceptions.Exit(1)


@cli.group(help="Inspect or reset per-session rule usage.")
def session() -> None:
    pass


@session.command("list", help="List sessions with recorded rule usage.")
@click.pass_obj
def session_list(settings: Settings) -> None:
    ui = GuardConsoleUI(Console())
    ui.render_session_list(settings.session_store().list_sessions())


@session.command("show", help="List rules already used in a session.")
@click.argument("session_id")
@click.pass_obj
def session_show(settings: Settings, session_id: str) -> None:
    ui = GuardConsoleUI(Console())
    ui.render_session(session_id, _tracker(settings).used_rules(session_id))


@session.command("reset", help="Forget rule usage for a session.")
@click.argument("session_id")
@click.pass_obj
def session_reset(settings: Settings, session_id: str) -> None:
    ui = GuardConsoleUI(Console())
    _tracker(settings).reset(session_id)
    ui.render_session_reset(session_id)


@session.command("mark", help="Record a rule as used in a session.")
@click.argument("session_id")
@click.argument("name")
@click.pass_obj
def session_mark(settings: Settings, session_id: str, name: str) -> None:
    ui = GuardConsoleUI(Console())
    rule_set, _ = _load_rules(settings)
    if name not in rule_set:
        raise click.ClickException(f"Rule not found: {name}")
    _tracker(settings).mark_used(session_id, name)
    ui.render_session_marked(session_id, name)


def main() -> int:
    try:
        result = cli(standalone_mode=False)
    except click.exceptions.Abort:
        return 1
    except click.ClickException as exc:
        exc.show()
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":
    raise SystemExit(main())
