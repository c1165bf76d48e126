from pathlib import Path


class SkillGuardError(Exception):
    """Base user-facing application error."""


class ConfigError(SkillGuardError):
    def __init__(self, path: Path | None, detail: str) -> None:
        self.path = path
        self.detail = detail
        message = f"Invalid skill rules ({detail})"
        super().__init__(f"{message}: {path}" if path is not None else message)


class MissingRulesFileError(ConfigError):
    def __init__(self, path: Path | None, searched: list[Path] | None = None) -> None:
        self.searched = list(searched or [])
        detail = "rules document not found"
        if self.searched:
            detail += "; searched " + ", ".join(str(item) for item in self.searched)
        super().__init__(path=path, detail=detail)


class InvalidDocumentFormatError(ConfigError):
    def __init__(self, path: Path | None, detail: str) -> None:
        super().__init__(path=path, detail=f"invalid document format: {detail}")


class InvalidRulesSchemaError(ConfigError):
    def __init__(self, path: Path | None, detail: str) -> None:
        super().__init__(path=path, detail=f"invalid schema: {detail}")


class EvaluationError(SkillGuardError):
    def __init__(self, rule_name: str, detail: str) -> None:
        self.rule_name = rule_name
        self.detail = detail
        super().__init__(f"Rule '{rule_name}' failed to evaluate: {detail}")


class PersistenceError(SkillGuardError):
    def __init__(self, path: Path | None, detail: str) -> None:
        self.path = path
        self.detail = detail
        message = f"Session state unavailable ({detail})"
        super().__init__(f"{message}: {path}" if path is not None else message)


class HookInputError(SkillGuardError):
    def __init__(self, detail: str) -> None:
        self.detail = detail
        super().__init__(f"Invalid hook input ({detail})")
