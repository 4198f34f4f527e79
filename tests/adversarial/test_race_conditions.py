"""
Adversarial tests for race condition attack prevention.

Verifies that concurrent operations on the same email or token are handled
atomically, preventing attackers from exploiting race conditions to:
- Create duplicate accounts for one email
- Record verification more than once
"""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from signup.domain.exceptions import InvalidRegistration
from signup.domain.registration import ConfirmStatus

# Apply adversarial marker to all tests in this module
pytestmark = pytest.mark.adversarial


class TestRegistrationRaces:
    """Concurrent registrations for the same email."""

    @pytest.mark.parametrize("num_attackers", [5, 20])
    def test_concurrent_registration_exactly_one_succeeds(
        self, service, repository, notifier, make_input, num_attackers: int
    ) -> None:
        """
        Attack scenario: many simultaneous registrations for one email.

        Expected defense: the store serializes creates; exactly one account
        commits, the rest see an email violation and trigger no email.
        """
        outcomes: list[str] = []
        outcomes_lock = threading.Lock()
        barrier = threading.Barrier(num_attackers)

        def attack_register(i: int) -> None:
            barrier.wait()
            try:
                service.register(make_input(first_name=f"Attacker{i}"))
                outcome = "created"
            except InvalidRegistration as e:
                assert [v.field for v in e.violations] == ["email"]
                outcome = "conflict"
            with outcomes_lock:
                outcomes.append(outcome)

        with ThreadPoolExecutor(max_workers=num_attackers) as executor:
            futures = [executor.submit(attack_register, i) for i in range(num_attackers)]
            for f in futures:
                f.result()

        assert outcomes.count("created") == 1, f"{outcomes.count('created')} accounts created"
        assert outcomes.count("conflict") == num_attackers - 1
        assert len(notifier.sent) == 1
        assert repository.find_by_id(2) is None


class TestConfirmationRaces:
    """Concurrent confirmations of one valid token."""

    def test_concurrent_confirmations_all_succeed_once(self, service, repository, registered) -> None:
        """
        Attack scenario: the same link is opened many times at once.

        Expected defense: every request reports success, exactly one performs
        the transition, and verified_at is written once.
        """
        account_id, token = registered
        num_requests = 10
        barrier = threading.Barrier(num_requests)

        def confirm():
            barrier.wait()
            return service.confirm(token)

        with ThreadPoolExecutor(max_workers=num_requests) as executor:
            results = [f.result() for f in [executor.submit(confirm) for _ in range(num_requests)]]

        assert all(r.status is ConfirmStatus.VERIFIED for r in results)
        assert sum(r.newly_verified for r in results) == 1
        assert repository.find_by_id(account_id).is_verified is True
