from __future__ import annotations

import os
from enum import Enum
from typing import Mapping, Optional

from skill_guard.rules.models import Rule
from skill_guard.session.tracker import SessionStateTracker
from skill_guard.utils import env_flag


class SkipReason(str, Enum):
    SESSION_SKILL_USED = "sessionSkillUsed"
    FILE_MARKER = "fileMarker"
    ENV_OVERRIDE = "envOverride"


class SkipConditionEvaluator:
    def __init__(
        self,
        tracker: SessionStateTracker,
        env: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.tracker = tracker
        self.env = env if env is not None else os.environ

    def skip_reason(
        self, rule: Rule, session_id: str, content: Optional[str]
    ) -> SkipReason | None:
        """Return the first escape hatch that suppresses a block, if any."""
        skip = rule.skip_conditions
        if skip.session_skill_used and self.tracker.was_used(session_id, rule.name):
            return SkipReason.SESSION_SKILL_USED
        if content is not None and any(marker in content for marker in skip.file_markers):
            return SkipReason.FILE_MARKER
        if skip.env_override and env_flag(self.env, skip.env_override):
            return SkipReason.ENV_OVERRIDE
        return None
