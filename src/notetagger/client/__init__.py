"""
HTTP client module for provider requests.
"""
from .executor import RequestExecutor

__all__ = ["RequestExecutor"]
