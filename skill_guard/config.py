from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from skill_guard.constants import CLAUDE_DIRNAME, SESSIONS_DIRNAME, STATE_DIRNAME
from skill_guard.rules.repository import RulesRepository
from skill_guard.session.store import FileSessionStore


@dataclass(frozen=True)
class Settings:
    rules_path: Optional[Path] = None
    plugin_root: Optional[Path] = None
    project_dir: Optional[Path] = None
    state_dir: Optional[Path] = None
    log_level: str = "WARNING"
    log_file: Optional[Path] = None

    def with_cwd(self, cwd: str) -> "Settings":
        """Fall back to the caller's working directory for the project root."""
        if self.project_dir is not None or not cwd:
            return self
        return replace(self, project_dir=Path(cwd))

    def resolved_project_dir(self) -> Path:
        return (self.project_dir or Path.cwd()).expanduser()

    def sessions_dir(self) -> Path:
        if self.state_dir is not None:
            return self.state_dir.expanduser()
        return self.resolved_project_dir() / CLAUDE_DIRNAME / STATE_DIRNAME / SESSIONS_DIRNAME

    def rules_repository(self) -> RulesRepository:
        return RulesRepository(
            rules_path=self.rules_path,
            plugin_root=self.plugin_root,
            project_dir=self.resolved_project_dir(),
        )

    def session_store(self) -> FileSessionStore:
        return FileSessionStore(self.sessions_dir())
