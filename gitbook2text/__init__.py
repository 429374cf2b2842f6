"""
gitbook2text package initializer.
Defines package version and exposes the conversion pipeline.
"""
__version__ = "0.1.0"

from .converter import convert_to_text
from .sanitizer import sanitize

__all__ = ["__version__", "convert_to_text", "sanitize"]
