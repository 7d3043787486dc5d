"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


@pytest.fixture(autouse=True)
def reset_rate_limiters():
    """Process-wide limiters must not carry counts between tests."""
    from core import rate_limiter

    limiters = (
        rate_limiter.api_rate_limiter,
        rate_limiter.upload_rate_limiter,
        rate_limiter.search_rate_limiter,
        rate_limiter.spoonacular_rate_limiter,
    )
    for limiter in limiters:
        limiter.clear()
    yield
    for limiter in limiters:
        limiter.clear()


from test_fixtures import cache_service, mongo_db  # noqa: E402,F401
