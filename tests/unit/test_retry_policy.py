"""Unit tests for the retry policy."""

import random

import pytest

from emarsys_client.utils.http import RetryPolicy


def test_defaults():
    policy = RetryPolicy()
    assert policy.max_retries == 5
    assert policy.max_attempts == 6


def test_interval_count_matches_budget():
    assert len(list(RetryPolicy().intervals())) == 5
    assert list(RetryPolicy(max_retries=0).intervals()) == []


def test_intervals_grow_within_jitter_bounds():
    policy = RetryPolicy(initial_interval=1.0, multiplier=2.0, randomization_factor=0.5)
    delays = list(policy.intervals(random.Random(3)))

    base = 1.0
    for delay in delays:
        assert base * 0.5 <= delay <= base * 1.5
        base *= 2.0


def test_intervals_capped_by_max_interval():
    policy = RetryPolicy(
        max_retries=6,
        initial_interval=10.0,
        multiplier=10.0,
        randomization_factor=0.0,
        max_interval=30.0,
    )
    assert list(policy.intervals()) == [10.0, 30.0, 30.0, 30.0, 30.0, 30.0]


def test_no_delay():
    assert list(RetryPolicy.no_delay(3).intervals()) == [0.0, 0.0, 0.0]


def test_seeded_intervals_are_reproducible():
    policy = RetryPolicy()
    assert list(policy.intervals(random.Random(1))) == list(
        policy.intervals(random.Random(1))
    )


@pytest.mark.parametrize(
    "kwargs",
    [
        {"max_retries": -1},
        {"initial_interval": -0.1},
        {"randomization_factor": 1.5},
    ],
)
def test_invalid_policy(kwargs):
    with pytest.raises(ValueError):
        RetryPolicy(**kwargs)
