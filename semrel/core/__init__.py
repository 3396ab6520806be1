"""Core types shared by every layer."""

from .config import Config, ConfigError, RetryConfig, find_config, load_config
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "Config",
    "ConfigError",
    "RetryConfig",
    "find_config",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]
