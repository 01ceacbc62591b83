from pathlib import Path

from dotenv import load_dotenv

env_file = Path(__file__).parent.parent / ".env.test"
load_dotenv(env_file)

import pytest  # noqa: E402

from app.core.rate_limit import limiter  # noqa: E402


@pytest.fixture(autouse=True)
def reset_rate_limits():
    """Rate limit counters are process-global; start every test from zero."""
    limiter.reset()
    yield
    limiter.reset()
