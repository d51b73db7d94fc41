#!/usr/bin/env python3
"""
Interactive local chat harness (no HTTP).

Usage:
    python scripts/chat_local.py [--no-persist]

Sends typed utterances through the same SessionManager the API uses and
prints each reply plus the dialogue state after the turn.
"""

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from callflow.core.scheduling.sessions import SessionManager  # noqa: E402


def print_header(session_id: str) -> None:
    """Print session banner."""
    print(f"\n{'='*60}")
    print(" CallFlow local chat")
    print(f" session: {session_id}")
    print(" Commands: /new (new session), /state, /quit")
    print(f"{'='*60}")


def main() -> int:
    parser = argparse.ArgumentParser(description="Chat with the scheduling assistant")
    parser.add_argument("--no-persist", action="store_true", help="Keep appointments in memory only")
    parser.add_argument("--debug", action="store_true", help="Show engine debug logs")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    manager = SessionManager(persist=not args.no_persist)
    session = manager.create()
    print_header(session.session_id)
    print(f"agent> {session.history[0]['content']}")

    while True:
        try:
            text = input("you> ")
        except (EOFError, KeyboardInterrupt):
            print()
            return 0

        command = text.strip().lower()
        if command == "/quit":
            return 0
        if command == "/new":
            session = manager.create()
            print_header(session.session_id)
            continue
        if command == "/state":
            print(session.to_dict())
            continue

        session, outcome = manager.handle_message(text, session.session_id)
        for line in outcome.reply.split("\n"):
            print(f"agent> {line}")
        if session.pending:
            print(f"  [awaiting: {session.pending.to_dict()}]")


if __name__ == "__main__":
    sys.exit(main())
