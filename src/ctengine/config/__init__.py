"""Configuration module for ctengine."""

from ctengine.config.logging import configure_logging, get_logger

__all__ = ["configure_logging", "get_logger"]
