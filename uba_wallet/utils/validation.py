import re
import string
from typing import Iterable, List, Optional
from urllib.parse import urlparse

from uba_wallet.core.exceptions import (
    InvalidSeedError, InvalidLabelError, InvalidRelayUrlError, InvalidUbaFormatError,
    UpdateValidationError
)

MAX_LABEL_LENGTH = 100
MAX_SEED_LENGTH = 1000
MAX_RELAY_URLS = 20
NOSTR_ID_LENGTH = 64

_LABEL_PATTERN = re.compile(r'^[A-Za-z0-9_-]+$')

def validate_seed(seed: str) -> None:
    """Cheap shape check; the seed itself is validated during derivation"""
    if not isinstance(seed, str) or not seed.strip():
        raise InvalidSeedError("Seed cannot be empty")
    if len(seed) > MAX_SEED_LENGTH:
        raise InvalidSeedError(f"Seed too long (max {MAX_SEED_LENGTH} characters)")

def validate_label(label: Optional[str]) -> None:
    """Labels are 1-100 characters of letters, digits, '-' and '_'"""
    if label is None:
        return
    if not label:
        raise InvalidLabelError("Label cannot be empty")
    if len(label) > MAX_LABEL_LENGTH:
        raise InvalidLabelError(f"Label too long (max {MAX_LABEL_LENGTH} characters)")
    if not _LABEL_PATTERN.match(label):
        raise InvalidLabelError(
            "Label can only contain alphanumeric characters, hyphens, and underscores"
        )

def is_valid_relay_url(url: str) -> bool:
    if not isinstance(url, str):
        return False
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in ("ws", "wss") and bool(parsed.netloc)

def validate_relay_url(url: str) -> None:
    if not is_valid_relay_url(url):
        raise InvalidRelayUrlError(f"Invalid relay URL: {url}")

def validate_relay_urls(urls: Iterable[str]) -> List[str]:
    urls = list(urls)
    if not urls:
        raise InvalidRelayUrlError("At least one relay URL is required")
    if len(urls) > MAX_RELAY_URLS:
        raise InvalidRelayUrlError(f"Too many relay URLs (max {MAX_RELAY_URLS})")
    for url in urls:
        validate_relay_url(url)
    return urls

def is_valid_nostr_id(value: str) -> bool:
    return (isinstance(value, str) and len(value) == NOSTR_ID_LENGTH
            and all(c in string.hexdigits for c in value))

def validate_nostr_id(value: str) -> None:
    if not is_valid_nostr_id(value):
        raise InvalidUbaFormatError("Invalid Nostr event ID: expected 64 hex characters")

def validate_address_collection(addresses) -> None:
    """Reject collections that would publish nothing useful"""
    if not addresses.addresses:
        raise UpdateValidationError("Cannot update UBA with empty address collection")
    if addresses.is_empty():
        raise UpdateValidationError("All address types are empty")
    for address_type, values in addresses.addresses.items():
        for address in values:
            if not address or not address.strip():
                raise UpdateValidationError(
                    f"Empty address found in {address_type.value} addresses"
                )
