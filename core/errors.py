"""
Exception hierarchy for the scoring pipeline.

Configuration problems are fatal and surface at construction or load time.
Stage failures are caught and isolated by the chain that runs them.
"""


class PipelineError(Exception):
    """Base exception for all pipeline errors."""


class ConfigurationError(PipelineError):
    """Raised when a configuration value is missing or invalid."""

    def __init__(self, key: str, reason: str = "missing or None"):
        self.key = key
        self.reason = reason
        super().__init__(f"Configuration error for '{key}': {reason}")


class StageError(PipelineError):
    """Raised when a stage produces an unusable result."""

    def __init__(self, stage: str, detail: str):
        self.stage = stage
        super().__init__(f"Stage '{stage}' failed: {detail}")
