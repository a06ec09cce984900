"""
Content layer - static knowledge packs
"""

from rep_gateway.content.store import ContentStore

__all__ = ["ContentStore"]
