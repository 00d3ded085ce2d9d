import time
from typing import Optional

def generate_mnemonic(strength: int = 128) -> str:
    """Generate BIP39 mnemonic phrase"""
    from mnemonic import Mnemonic
    mnemo = Mnemonic("english")
    return mnemo.generate(strength=strength)

def validate_mnemonic(mnemonic_phrase: str) -> bool:
    """Validate BIP39 mnemonic phrase"""
    from mnemonic import Mnemonic
    mnemo = Mnemonic("english")
    return mnemo.check(" ".join(mnemonic_phrase.split()))

def current_timestamp() -> int:
    return int(time.time())

def strip_uba_prefix(value: str) -> str:
    """Bare event id from either an id or a full UBA string"""
    if value.startswith("UBA:"):
        value = value[4:]
        value = value.split("&", 1)[0]
    return value

def short_id(event_id: Optional[str], length: int = 8) -> str:
    if not event_id:
        return ""
    return event_id[:length] + "..." if len(event_id) > length else event_id
