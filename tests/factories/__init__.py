"""Test data factories for the Challenge Platform."""

from tests.factories.challenge_factory import InMemoryChallengeRepository, StoredChallenge

__all__ = [
    "InMemoryChallengeRepository",
    "StoredChallenge",
]
