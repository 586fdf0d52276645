"""Pytest configuration and fixtures for diffscope tests."""

import pytest


# =============================================================================
# SOURCE FIXTURES
# =============================================================================

# Add on lines 3-5, Subtract on lines 7-9
CALC_GO = """\
package calc

func Add(a, b int) int {
	return a + b
}

func Subtract(a, b int) int {
	return a - b
}
"""

# Only hunk touches Add
CALC_GO_DIFF = """\
diff --git a/calc.go b/calc.go
index 1111111..2222222 100644
--- a/calc.go
+++ b/calc.go
@@ -3,3 +3,3 @@ package calc
 func Add(a, b int) int {
-	return a - b
+	return a + b
 }
"""


@pytest.fixture
def calc_go() -> str:
    """Go source with two top-level functions."""
    return CALC_GO


@pytest.fixture
def calc_go_diff() -> str:
    """Diff whose only hunk starts inside Add."""
    return CALC_GO_DIFF


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    """Remove every DIFFSCOPE_* variable so defaults apply."""
    for name in (
        "DIFFSCOPE_MODEL",
        "DIFFSCOPE_MAX_CONTEXT_LENGTH",
        "DIFFSCOPE_MAX_CHUNK_TOKENS",
        "DIFFSCOPE_RESPONSE_RESERVE",
        "DIFFSCOPE_STRICT_CHUNK_BUDGET",
        "DIFFSCOPE_LOG_FORMAT",
        "DIFFSCOPE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return monkeypatch
