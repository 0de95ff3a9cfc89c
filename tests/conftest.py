"""Shared fixtures for ft_sniper tests."""

from __future__ import annotations

import pytest

from ft_sniper.models.config import SniperConfig
from ft_sniper.notify.dispatcher import NotificationDispatcher
from ft_sniper.policy.filter import FirstBuyClassifier
from ft_sniper.storage.sqlite import SQLiteCheckpointStore
from ft_sniper.sync.syncer import BlockRangeSyncer

from tests.factories import BUY_SELECTOR, CONTRACT
from tests.mocks import MockChain, MockNotifier, MockStore, SpyDecoder

RPC_URL = "http://node.test"


def make_test_config(**overrides) -> SniperConfig:
    """Build a SniperConfig suitable for testing."""
    defaults = dict(
        sync_interval=0,
        rpc_url=RPC_URL,
        default_start_block=100,
        notify_batch_delay=0,
        db_path=":memory:",
    )
    defaults.update(overrides)
    return SniperConfig(**defaults)


@pytest.fixture
def test_config():
    return make_test_config()


@pytest.fixture
async def store():
    """Initialized in-memory SQLiteCheckpointStore."""
    s = SQLiteCheckpointStore(":memory:", default_synced_block=100, default_external_cursor=11)
    await s.initialize()
    yield s
    await s.close()


@pytest.fixture
def journal():
    """Ordered record of store writes and chain fetches."""
    return []


@pytest.fixture
def mock_chain(journal):
    return MockChain(head=100, journal=journal)


@pytest.fixture
def mock_store(journal):
    return MockStore(synced_block=100, journal=journal)


@pytest.fixture
def mock_notifier():
    return MockNotifier()


@pytest.fixture
def decoder():
    return SpyDecoder(BUY_SELECTOR)


@pytest.fixture
def classifier(decoder):
    return FirstBuyClassifier(CONTRACT, decoder)


@pytest.fixture
def syncer(mock_chain, mock_store, classifier, mock_notifier):
    """BlockRangeSyncer wired to mocks, with the default window and threshold."""
    return BlockRangeSyncer(
        mock_chain,
        mock_store,
        classifier,
        NotificationDispatcher(mock_notifier, batch_size=5, batch_delay=0),
    )
