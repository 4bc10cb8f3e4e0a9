"""
Synonym Expander.

Appends canonical vocabulary terms to a message when one of their synonyms
is present, so that downstream keyword rules only need to know the canonical
term ("how much does it cost" gains "price").
"""

from typing import Dict, Tuple

from lavashow_chat.knowledge.rules import SYNONYMS


def expand_terms(message: str, synonyms: Dict[str, Tuple[str, ...]] = SYNONYMS) -> str:
    """
    Expand a lowercased message with canonical terms.

    For each canonical term in table order: if the message contains any of its
    synonyms and does not already contain the term itself, " <term>" is
    appended. Checks run against the input message, so applying the function
    to its own output never duplicates a term.

    Args:
        message: Lowercased visitor message
        synonyms: Canonical term -> synonyms table (defaults to SYNONYMS)

    Returns:
        The original message followed by zero or more appended terms
    """
    expanded = message
    for term, term_synonyms in synonyms.items():
        if term in message:
            continue
        if any(synonym in message for synonym in term_synonyms):
            expanded += f" {term}"
    return expanded
