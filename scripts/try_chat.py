#!/usr/bin/env python3
"""
Lava Show Chat Test Script

Runs visitor messages through the chat pipeline locally, without the HTTP
layer or the chat widget.

With --offline only the rule-based part runs (synonyms, classification,
knowledge matching, pricing), so no GOOGLE_API_KEY is needed.

Usage:
    python scripts/try_chat.py --message "How much for 2 adults and 1 child?"
    python scripts/try_chat.py --message "where is the vik location" --offline
    python scripts/try_chat.py --suite
"""

import argparse
import asyncio
import json
import logging
import os
import sys

# Add the project root to the path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

os.environ.setdefault("VALIDATE_CONFIG", "false")

from lavashow_chat.config import settings  # noqa: E402
from lavashow_chat.services.chat_service import LLMServiceError, get_chat_service  # noqa: E402
from lavashow_chat.services.knowledge_service import retrieve  # noqa: E402
from lavashow_chat.services.pricing_service import compute_pricing  # noqa: E402

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger(__name__)

SAMPLE_CONVERSATION = [
    "Hello",
    "What is the difference between the classic and premium experience?",
    "How much for 2 adults and 1 child, classic?",
    "Where is the show in Vik?",
    "How does the lava work?",
    "yes",
    "Is it safe for kids?",
]


def print_retrieval(message: str) -> None:
    """Print what the rule-based retrieval selects for a message."""
    result = retrieve(message)

    print("\n" + "=" * 60)
    print(f"MESSAGE:    {message}")
    print(f"QUERY TYPE: {result.query_type}")
    print("=" * 60)

    if not result.relevant_info:
        print("\n❌ No knowledge matched\n")
    for info in result.relevant_info:
        suffix = f"  ({info.context})" if info.context else ""
        print(f"  [{info.priority:>2}] {info.type}{suffix}")

    if result.query_type == "pricing":
        pricing = compute_pricing(message, None)
        print("\n💰 Pricing:")
        print(json.dumps(pricing.model_dump(exclude_none=True), indent=2, ensure_ascii=False))
    print()


async def run_conversation(messages, session_id: str = "script-session") -> None:
    """Send messages in order through one chat session."""
    if not settings.GOOGLE_API_KEY:
        print("\n⚠️  ERROR: GOOGLE_API_KEY environment variable not set!")
        print("   Please set it in your .env file or use --offline.")
        return

    service = get_chat_service()
    for message in messages:
        print("\n" + "-" * 60)
        print(f"👤 {message}")
        try:
            response = await service.handle_message(message, session_id=session_id)
        except LLMServiceError as e:
            print(f"❌ LLM error: {e}")
            continue
        label = f" [{response.query_type}]" if response.query_type else ""
        cached = " (cached)" if response.cached else ""
        print(f"🌋{label}{cached} {response.message}")


def main():
    parser = argparse.ArgumentParser(
        description="Try the Lava Show chat pipeline locally",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Ask one question (calls Gemini)
  python scripts/try_chat.py --message "Is the show suitable for children?"

  # Inspect retrieval and pricing only
  python scripts/try_chat.py --message "12 adults, premium" --offline

  # Run the sample conversation
  python scripts/try_chat.py --suite
        """
    )

    parser.add_argument(
        "--message", "-m",
        type=str,
        help="Visitor message"
    )
    parser.add_argument(
        "--offline",
        action="store_true",
        help="Only run retrieval and pricing (no Gemini call)"
    )
    parser.add_argument(
        "--suite",
        action="store_true",
        help="Run the sample conversation"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    messages = SAMPLE_CONVERSATION if args.suite or not args.message else [args.message]

    if args.offline:
        for message in messages:
            print_retrieval(message)
    else:
        asyncio.run(run_conversation(messages))


if __name__ == "__main__":
    main()
