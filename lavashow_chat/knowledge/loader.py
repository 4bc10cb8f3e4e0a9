"""
Knowledge document loader.

The knowledge document is a static, deeply nested JSON file shipped with the
package. It is loaded once per process and addressed by dotted key paths
(e.g. "safety_protocols.visitor_safety.children_policy").

A missing key path is a programming/config error: get_knowledge() raises
KnowledgeKeyError instead of returning a default.
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parent / "data"
KNOWLEDGE_BASE_FILE = DATA_DIR / "knowledge_base.json"


class KnowledgeKeyError(KeyError):
    """Raised when a key path does not exist in the knowledge document."""


@lru_cache(maxsize=None)
def load_knowledge_base() -> Dict[str, Any]:
    """Load the knowledge document (cached for the process lifetime)."""
    with open(KNOWLEDGE_BASE_FILE, "r", encoding="utf-8") as handle:
        document = json.load(handle)
    logger.info(f"Knowledge document loaded with {len(document)} top-level topics")
    return document


def get_knowledge(path: str) -> Any:
    """
    Resolve a dotted key path against the knowledge document.

    The returned object is shared; callers must treat it as read-only.

    Raises:
        KnowledgeKeyError: If any segment of the path is missing.
    """
    node: Any = load_knowledge_base()
    walked = []
    for part in path.split("."):
        walked.append(part)
        if not isinstance(node, dict) or part not in node:
            raise KnowledgeKeyError(
                f"Knowledge key '{'.'.join(walked)}' not found while resolving '{path}'"
            )
        node = node[part]
    return node
