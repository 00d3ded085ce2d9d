from .logging import LogManager, configure_logging, logger
from .validation import validate_label, validate_relay_urls, validate_seed
from .helpers import generate_mnemonic, validate_mnemonic
from .rate_limiter import RateLimiter

__all__ = [
    'LogManager',
    'configure_logging',
    'logger',
    'validate_label',
    'validate_relay_urls',
    'validate_seed',
    'generate_mnemonic',
    'validate_mnemonic',
    'RateLimiter'
]
