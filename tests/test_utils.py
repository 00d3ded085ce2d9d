"""Tests for validation helpers, the rate limiter and logging setup."""

import json
import logging
import time

import pytest

from uba_wallet.core.config import UbaConfig
from uba_wallet.core.exceptions import (
    InvalidLabelError, InvalidRelayUrlError, InvalidSeedError, RateLimitError
)
from uba_wallet.crypto.key_management import KeyManager
from uba_wallet.utils.helpers import generate_mnemonic, strip_uba_prefix, validate_mnemonic
from uba_wallet.utils.logging import LogFormat, SensitiveDataFilter, StructuredFormatter, logger
from uba_wallet.utils.rate_limiter import RateLimiter
from uba_wallet.utils.validation import (
    is_valid_relay_url, validate_label, validate_relay_urls, validate_seed
)

from conftest import TEST_EVENT_ID, TEST_MNEMONIC


# -----------------------------------------------------------------------------
# validation
# -----------------------------------------------------------------------------


@pytest.mark.parametrize("url,valid", [
    ("wss://relay.damus.io", True),
    ("ws://localhost:7777", True),
    ("https://relay.damus.io", False),
    ("wss://", False),
    ("relay.damus.io", False),
    ("", False),
])
def test_relay_url(url: str, valid: bool) -> None:
    assert is_valid_relay_url(url) is valid


def test_relay_list_limits() -> None:
    assert validate_relay_urls(("wss://a.example",)) == ["wss://a.example"]
    with pytest.raises(InvalidRelayUrlError):
        validate_relay_urls([])
    with pytest.raises(InvalidRelayUrlError):
        validate_relay_urls(["wss://a.example"] * 21)


@pytest.mark.parametrize("label", ["a", "my-wallet", "Wallet_2024", "x" * 100, None])
def test_valid_labels(label) -> None:
    validate_label(label)


@pytest.mark.parametrize("label", ["", "x" * 101, "with space", "dot.ted", "slash/"])
def test_invalid_labels(label: str) -> None:
    with pytest.raises(InvalidLabelError):
        validate_label(label)


def test_seed_shape() -> None:
    validate_seed(TEST_MNEMONIC)
    with pytest.raises(InvalidSeedError):
        validate_seed("")
    with pytest.raises(InvalidSeedError):
        validate_seed("a" * 1001)


def test_strip_uba_prefix() -> None:
    assert strip_uba_prefix(TEST_EVENT_ID) == TEST_EVENT_ID
    assert strip_uba_prefix(f"UBA:{TEST_EVENT_ID}&label=x") == TEST_EVENT_ID


def test_mnemonic_helpers() -> None:
    phrase = generate_mnemonic()
    assert len(phrase.split()) == 12
    assert validate_mnemonic(phrase)
    assert validate_mnemonic(TEST_MNEMONIC)
    assert not validate_mnemonic("abandon " * 12)


# -----------------------------------------------------------------------------
# rate limiter
# -----------------------------------------------------------------------------


def test_rate_limiter_blocks_over_limit() -> None:
    limiter = RateLimiter(max_requests=2, window=60)

    assert limiter.is_allowed("wss://a")
    assert limiter.is_allowed("wss://a")
    with pytest.raises(RateLimitError):
        limiter.is_allowed("wss://a")
    assert limiter.is_allowed("wss://b")
    assert limiter.remaining("wss://a") == 0
    assert limiter.get_stats()["total_limited"] == 1


def test_rate_limiter_window_expires() -> None:
    limiter = RateLimiter(max_requests=1, window=0.05)
    limiter.is_allowed("wss://a")
    time.sleep(0.1)

    assert limiter.is_allowed("wss://a")


def test_rate_limiter_cleanup() -> None:
    limiter = RateLimiter(max_requests=1, window=0.05)
    limiter.is_allowed("wss://a")
    time.sleep(0.1)

    assert limiter.cleanup() == 1
    assert limiter.remaining("wss://a") == 1


def test_rate_limiter_arguments() -> None:
    with pytest.raises(ValueError):
        RateLimiter(max_requests=0, window=1)
    with pytest.raises(ValueError):
        RateLimiter(max_requests=1, window=0)


# -----------------------------------------------------------------------------
# logging
# -----------------------------------------------------------------------------


def _record(msg: str, **data) -> logging.LogRecord:
    record = logging.LogRecord("uba_wallet.test", logging.INFO, __file__, 1, msg, None, None)
    record.structured_data = data
    return record


def test_sensitive_data_is_masked() -> None:
    log_filter = SensitiveDataFilter()
    log_filter.add_sensitive_pattern(TEST_MNEMONIC)
    record = _record(f"seed={TEST_MNEMONIC}", seed=TEST_MNEMONIC)

    assert log_filter.filter(record)
    assert TEST_MNEMONIC not in record.msg
    assert record.msg.startswith("seed=aban*")
    assert TEST_MNEMONIC not in record.structured_data["seed"]


def test_seed_is_masked_once_keys_are_derived(caplog: pytest.LogCaptureFixture) -> None:
    seed = "legal winner thank year wave sausage worth useful legal winner thank yellow"
    KeyManager(seed)

    with caplog.at_level(logging.INFO, logger="uba_wallet"):
        logger.info(f"derived from {seed}", seed=seed)

    record = caplog.records[-1]
    assert seed not in record.getMessage()
    assert seed not in record.structured_data["seed"]
    assert record.structured_data["seed"].startswith("lega*")


def test_encryption_key_is_masked_once_configured(caplog: pytest.LogCaptureFixture) -> None:
    key = bytes([7] * 32)
    UbaConfig(encryption_key=key)

    with caplog.at_level(logging.INFO, logger="uba_wallet"):
        logger.info(f"key {key.hex()}")

    assert key.hex() not in caplog.records[-1].getMessage()


def test_json_formatter() -> None:
    line = StructuredFormatter(LogFormat.JSON).format(_record("hello", family="P2TR"))
    entry = json.loads(line)

    assert entry["message"] == "hello"
    assert entry["level"] == "INFO"
    assert entry["data"] == {"family": "P2TR"}


def test_text_formatter() -> None:
    line = StructuredFormatter(LogFormat.DETAILED).format(_record("hello", family="P2TR"))
    assert "| INFO     | uba_wallet.test | hello |" in line
    assert '"family": "P2TR"' in line
