"""
Shared test fixtures
====================

The gateway module refuses to import without an API key, so a dummy key is
provided before any test module is collected. No test reaches the provider.
"""

# -----------------------------------------------------------------------------
# Libraries
# -----------------------------------------------------------------------------

# Standard libraries
import os                 # Dummy credentials for offline tests

# Third-party libraries
import pytest             # Pytest framework for isolated and reproducible testing

os.environ.setdefault("OPENAI_API_KEY", "test-key-not-used")

# ----------------------------
# Fixtures
# ----------------------------

@pytest.fixture(autouse=True)
def fresh_rate_limiter():
    """Start every test with an empty process-wide limiter."""
    import app
    app.rate_limiter.reset()
    yield
    app.rate_limiter.reset()
