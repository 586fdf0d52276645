"""
Token estimation and budget management for LLM requests.

Estimates are character based and deliberately conservative; no tokenizer
is loaded.
"""

from dataclasses import dataclass

# Context window sizes, matched by substring in order (first hit wins)
MODEL_MAX_TOKENS: list[tuple[str, int]] = [
    ("gpt-4-turbo", 128000),
    ("gpt-4o", 128000),
    ("gpt-4", 8192),
    ("gpt-3.5", 16384),
    ("claude-3", 200000),
    ("gemini-1.5-flash", 1048576),
    ("gemini", 32768),
    ("llama", 8192),
    ("mistral", 32768),
    ("qwen", 32768),
]

# Average characters per token by model family
MODEL_CHARS_PER_TOKEN: list[tuple[str, float]] = [
    ("gpt-4", 4.0),
    ("gpt-3.5", 4.0),
    ("claude", 3.5),
    ("gemini", 4.0),
    ("llama", 4.5),
    ("mistral", 4.0),
    ("qwen", 3.0),  # CJK characters use more tokens
]

DEFAULT_CHARS_PER_TOKEN = 4.0
DEFAULT_MAX_TOKENS = 8000
DEFAULT_RESPONSE_RESERVE = 2000

# Substrings that mark text as code; three or more present means code-like
CODE_INDICATORS = (
    "func ", "function ", "def ", "class ",
    "if ", "for ", "while ", "switch ",
    "import ", "require(", "from ",
    "return ", "const ", "let ", "var ",
    "{", "}", "(", ")", "[", "]",
    "=>", "->", "::", "//", "/*",
)

CODE_MULTIPLIER = 1.3
WHITESPACE_MULTIPLIER = 0.9
WHITESPACE_RATIO_THRESHOLD = 0.3

# Fixed overhead added per review request
METADATA_OVERHEAD_TOKENS = 50
SYSTEM_PROMPT_TOKENS = 200

_WHITESPACE = frozenset(" \t\n\r")


def _lookup(model: str, table, default):
    for needle, value in table:
        if needle in model:
            return value
    return default


def get_model_max_tokens(model: str) -> int:
    """Context window size for a model name, 8000 when unknown."""
    return _lookup(model, MODEL_MAX_TOKENS, DEFAULT_MAX_TOKENS)


def is_code_like(text: str) -> bool:
    """True when the text carries at least three code indicators."""
    lowered = text.lower()
    return sum(1 for ind in CODE_INDICATORS if ind in lowered) >= 3


def whitespace_ratio(text: str) -> float:
    """Fraction of characters that are spaces, tabs or line breaks."""
    if not text:
        return 0.0
    return sum(1 for ch in text if ch in _WHITESPACE) / len(text)


class TokenEstimator:
    """Estimate token counts for text."""

    def __init__(self, chars_per_token: float = DEFAULT_CHARS_PER_TOKEN):
        self.chars_per_token = chars_per_token
        self.model_multiplier = 1.0

    @classmethod
    def for_model(cls, model: str) -> "TokenEstimator":
        """Create an estimator tuned for a model family."""
        return cls(_lookup(model, MODEL_CHARS_PER_TOKEN, DEFAULT_CHARS_PER_TOKEN))

    def estimate_tokens(self, text: str) -> int:
        """
        Estimate the token count of text.

        Code is denser than prose (punctuation splits into many tokens), while
        indentation-heavy text compresses well, so the plain character ratio
        is adjusted in both directions.
        """
        if not text:
            return 0

        estimate = len(text) / self.chars_per_token

        if is_code_like(text):
            estimate *= CODE_MULTIPLIER

        if whitespace_ratio(text) > WHITESPACE_RATIO_THRESHOLD:
            estimate *= WHITESPACE_MULTIPLIER

        return int(estimate * self.model_multiplier)

    def estimate_tokens_for_diff(self, diff: str, language: str, file_path: str) -> int:
        """Estimate tokens for a full review request around a diff."""
        diff_tokens = self.estimate_tokens(diff)
        metadata_tokens = (
            self.estimate_tokens(language)
            + self.estimate_tokens(file_path)
            + METADATA_OVERHEAD_TOKENS
        )
        return diff_tokens + metadata_tokens + SYSTEM_PROMPT_TOKENS


def estimate_tokens(text: str) -> int:
    """Estimate tokens with the default estimator."""
    return TokenEstimator().estimate_tokens(text)


@dataclass
class Budget:
    """Token allowance for one model request.

    ``available`` is not clamped at zero; check ``can_fit`` before spending.
    """

    max_tokens: int = DEFAULT_MAX_TOKENS
    response_reserve: int = DEFAULT_RESPONSE_RESERVE
    used: int = 0

    def __post_init__(self) -> None:
        if self.max_tokens <= 0:
            self.max_tokens = DEFAULT_MAX_TOKENS
        if self.response_reserve <= 0:
            self.response_reserve = DEFAULT_RESPONSE_RESERVE

    @classmethod
    def for_model(
        cls, model: str, response_reserve: int = DEFAULT_RESPONSE_RESERVE
    ) -> "Budget":
        """Budget sized to a model's context window."""
        return cls(get_model_max_tokens(model), response_reserve)

    @property
    def available(self) -> int:
        """Tokens still available for input."""
        return self.max_tokens - self.response_reserve - self.used

    def use(self, tokens: int) -> None:
        """Mark tokens as used."""
        self.used += tokens

    def can_fit(self, tokens: int) -> bool:
        """Check if a number of tokens fits in what is left."""
        return tokens <= self.available

    def reset(self) -> None:
        self.used = 0
