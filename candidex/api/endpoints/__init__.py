"""
API endpoint modules.
"""

from candidex.api.endpoints import interview

__all__ = ["interview"]
