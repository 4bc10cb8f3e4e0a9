"""
Static knowledge for the Lava Show chat backend.

- loader: the JSON knowledge document and dotted key-path lookup
- rules: synonym, query-type, topic and interest tables
"""

from .loader import KnowledgeKeyError, get_knowledge, load_knowledge_base

__all__ = [
    "KnowledgeKeyError",
    "get_knowledge",
    "load_knowledge_base",
]
