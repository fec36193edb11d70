from typing import Optional


class TileCacheException(Exception):
    """Base exception for tile cache"""
    pass


class ConfigurationError(TileCacheException):
    """Configuration related errors"""
    pass


class ValidationError(TileCacheException):
    """Validation related errors"""
    pass


class NotFoundError(TileCacheException):
    """Requested tile is not stored and downloading was not requested"""
    pass


class FetchError(TileCacheException):
    """Download related errors"""

    def __init__(self, message: str, url: Optional[str] = None, status: Optional[int] = None):
        super().__init__(message)
        self.url = url
        self.status = status


class StoreError(TileCacheException):
    """Persistent store related errors"""
    pass


class StoreInitError(StoreError):
    """Store could not be opened or has an incompatible version"""
    pass


class StoreReadError(StoreError):
    """Reading an entry failed"""
    pass


class StoreWriteError(StoreError):
    """Writing or clearing entries failed"""
    pass
