from .uba import (
    format_uba, parse_uba, generate, retrieve, retrieve_full,
    update, update_uba, update_uba_with_addresses
)

__all__ = [
    'format_uba',
    'parse_uba',
    'generate',
    'retrieve',
    'retrieve_full',
    'update',
    'update_uba',
    'update_uba_with_addresses'
]
