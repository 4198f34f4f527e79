"""
Shared fixtures for adversarial tests.

Provides a thread-safe service wiring for race condition and forgery tests.
"""

import pytest

# Module-level marker for all adversarial tests
pytestmark = pytest.mark.adversarial


@pytest.fixture
def registered(service, notifier, make_input):
    """Register the default account and return (account_id, token)."""
    pending = service.register(make_input())
    return pending.account_id, notifier.last_token()
