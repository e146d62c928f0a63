from src.core.config import Settings, get_config
from src.core.errors import ContractViolation, SnapSongError, UpstreamError, ValidationError
from src.core.logging import setup_logging

__all__ = [
    "ContractViolation",
    "Settings",
    "SnapSongError",
    "UpstreamError",
    "ValidationError",
    "get_config",
    "setup_logging",
]
