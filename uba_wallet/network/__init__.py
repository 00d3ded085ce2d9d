from .nostr_client import NostrRelayStore, NostrKeys, check_relay

__all__ = [
    'NostrRelayStore',
    'NostrKeys',
    'check_relay'
]
