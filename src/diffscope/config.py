"""Configuration for the diffscope preparation pipeline.

Values come from environment variables so the review service embedding this
package can tune budgets without code changes.
"""

import os
from dataclasses import dataclass

from .errors import ConfigError
from .tokens import DEFAULT_RESPONSE_RESERVE, Budget

_TRUE_VALUES = {"1", "true", "yes", "on"}


def _get_int(name: str, default: int) -> int:
    """Read an integer environment variable."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be an integer, got {raw!r}") from e


def _get_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in _TRUE_VALUES


@dataclass
class PrepConfig:
    """Pipeline configuration."""

    # Model name used for token estimation and context window lookup
    model: str = ""

    # ContextBuilder output cap (characters)
    max_context_length: int = 2000

    # Chunker budget per chunk (estimated tokens)
    max_chunk_tokens: int = 2000
    strict_chunk_budget: bool = False

    # Tokens held back for the model's answer
    response_reserve: int = DEFAULT_RESPONSE_RESERVE

    # Logging
    log_format: str = "console"  # "console" | "json"
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "PrepConfig":
        """Create configuration from environment variables."""
        return cls(
            model=os.getenv("DIFFSCOPE_MODEL", ""),
            max_context_length=_get_int("DIFFSCOPE_MAX_CONTEXT_LENGTH", 2000),
            max_chunk_tokens=_get_int("DIFFSCOPE_MAX_CHUNK_TOKENS", 2000),
            strict_chunk_budget=_get_bool("DIFFSCOPE_STRICT_CHUNK_BUDGET", False),
            response_reserve=_get_int(
                "DIFFSCOPE_RESPONSE_RESERVE", DEFAULT_RESPONSE_RESERVE
            ),
            log_format=os.getenv("DIFFSCOPE_LOG_FORMAT", "console"),
            log_level=os.getenv("DIFFSCOPE_LOG_LEVEL", "INFO"),
        )

    def budget(self) -> Budget:
        """Fresh token budget for the configured model."""
        return Budget.for_model(self.model, self.response_reserve)
