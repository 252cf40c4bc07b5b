"""Shared fixtures for credential provisioning tests."""

import pytest

from credentials.pki.issuer import IdentityIssuer
from credentials.pki.roles import signing_role, tls_role

# Smaller RSA keys keep the suite fast; 4096 is the production default
TEST_SIGNING_KEY_SIZE = 2048


class ScriptedConfirm:
    """Confirm capability that answers from a script and records prompts."""

    def __init__(self, *answers: bool):
        self._answers = list(answers)
        self.prompts: list[str] = []

    def __call__(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        if not self._answers:
            raise AssertionError(f"Unexpected prompt: {prompt}")
        return self._answers.pop(0)


@pytest.fixture
def signing_issuer():
    return IdentityIssuer(signing_role(key_size=TEST_SIGNING_KEY_SIZE))


@pytest.fixture
def tls_issuer():
    return IdentityIssuer(tls_role())


def snapshot(directory):
    """Names and modification times of everything in ``directory``."""
    return {p.name: p.stat().st_mtime_ns for p in sorted(directory.iterdir())}
