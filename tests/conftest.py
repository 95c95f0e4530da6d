"""Pytest configuration and fixtures

Shared fakes for the game contract, deterministic wallets and a loguru
capture sink so tests can assert on the bot's log lines.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from eth_account import Account
from loguru import logger

from ropewar.evm import SendError

KEYS = [
    "0x" + "11" * 32,
    "0x" + "22" * 32,
    "0x" + "33" * 32,
]


class FakeGame:
    """Records every call the bot makes against the game contract."""

    def __init__(self, nonces=None, fail_moves=None, fail_nonce=None):
        self.nonces = dict(nonces or {})
        self.fail_moves = dict(fail_moves or {})  # call index -> ErrKind
        self.fail_nonce = dict(fail_nonce or {})  # call index -> ErrKind
        self.calls = []
        self.nonce_calls = 0
        self.move_calls = 0

    def nonce(self, ac):
        self.nonce_calls += 1
        self.calls.append(("nonce", ac.address))
        kind = self.fail_nonce.get(self.nonce_calls)
        if kind is not None:
            raise SendError(kind, "nonce query failed")

        return self.nonces.get(ac.address, 0)

    def move(self, ac, action, nonce):
        self.move_calls += 1
        self.calls.append(("move", ac.address, action, nonce))
        kind = self.fail_moves.get(self.move_calls)
        if kind is not None:
            raise SendError(kind, f"{kind.value} failure")

        return f"0x{self.move_calls:064x}"


class ScriptedRandom:
    """random.Random stand-in that returns pre-scripted choices in order."""

    def __init__(self, picks):
        self.picks = list(picks)

    def choice(self, seq):
        item = self.picks.pop(0)
        assert item in seq, f"scripted pick {item!r} not in {seq!r}"
        return item


@pytest.fixture
def accounts():
    return [Account.from_key(x) for x in KEYS]


@pytest.fixture
def fake_game():
    return FakeGame()


@pytest.fixture
def log_lines():
    lines = []
    sink_id = logger.add(lambda msg: lines.append(str(msg).rstrip("\n")), level="DEBUG", format="{level}|{message}")
    yield lines
    logger.remove(sink_id)
