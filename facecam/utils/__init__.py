"""
Utility modules for FaceCam.

Contains configuration management, the label table and exception types.
"""

from .config import Config, PlatformProfile, resolve_platform
from .labels import load_labels

__all__ = ["Config", "PlatformProfile", "resolve_platform", "load_labels"]
