class UbaError(Exception):
    """Base exception for UBA errors"""
    pass

class ValidationError(UbaError):
    """Caller-supplied input failed validation"""
    pass

class InvalidSeedError(ValidationError):
    """Seed is neither a BIP39 mnemonic nor a 32-byte hex key"""
    pass

class InvalidUbaFormatError(ValidationError):
    """Malformed UBA string"""
    pass

class InvalidLabelError(ValidationError):
    """Invalid label"""
    pass

class InvalidRelayUrlError(ValidationError):
    """Invalid relay URL"""
    pass

class InvalidEncryptionKeyError(ValidationError):
    """Encryption key has the wrong format or length"""
    pass

class ConfigError(ValidationError):
    """Configuration errors"""
    pass

class UpdateValidationError(ValidationError):
    """Collection rejected before an update is published"""
    pass

class AddressGenerationError(UbaError):
    """Address derivation or encoding failed"""
    pass

class KeyDerivationError(AddressGenerationError):
    """Child key derivation failed"""
    pass

class EncryptionError(UbaError):
    """Encryption/decryption errors"""
    pass

class SerializationError(UbaError):
    """JSON serialization/deserialization errors"""
    pass

class StoreError(UbaError):
    """Base class for event store errors"""
    pass

class NostrRelayError(StoreError):
    """Relay rejected a request or answered with garbage"""
    pass

class NetworkError(StoreError):
    """Connection-level errors"""
    pass

class UbaTimeoutError(StoreError):
    """Store operation timed out"""

    def __init__(self, message: str = "Operation timed out"):
        super().__init__(message)

class NoteNotFoundError(StoreError):
    """No relay returned the requested event"""

    def __init__(self, event_id: str):
        self.event_id = event_id
        super().__init__(f"Note not found with ID: {event_id}")

class EventNotFoundError(StoreError):
    """Event to be replaced does not exist"""
    pass

class RateLimitError(StoreError):
    """Rate limit exceeded"""
    pass
