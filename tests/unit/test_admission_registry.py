from __future__ import annotations

import threading
from concurrent.futures import ThreadPoolExecutor

from user_accounts.application.services.admission_registry import AdmissionRegistry


def test_reserve_returns_true_only_for_first_caller() -> None:
    registry = AdmissionRegistry()

    assert registry.reserve("alice") is True
    assert registry.reserve("alice") is False
    assert registry.is_reserved("alice") is True


def test_release_allows_new_reservation() -> None:
    registry = AdmissionRegistry()
    registry.reserve("alice")

    registry.release("alice")

    assert registry.is_reserved("alice") is False
    assert registry.reserve("alice") is True


def test_release_of_unknown_login_is_noop() -> None:
    registry = AdmissionRegistry()

    registry.release("ghost")

    assert len(registry) == 0


def test_reservations_are_keyed_by_login() -> None:
    registry = AdmissionRegistry()

    assert registry.reserve("alice") is True
    assert registry.reserve("bob") is True
    assert len(registry) == 2


def test_independent_registries_do_not_share_reservations() -> None:
    first = AdmissionRegistry()
    second = AdmissionRegistry()

    assert first.reserve("alice") is True
    assert second.reserve("alice") is True


def test_reserve_is_exclusive_across_threads() -> None:
    registry = AdmissionRegistry()
    workers = 16
    barrier = threading.Barrier(workers)

    def attempt(_: int) -> bool:
        barrier.wait()
        return registry.reserve("alice")

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(attempt, range(workers)))

    assert results.count(True) == 1
    assert len(registry) == 1
