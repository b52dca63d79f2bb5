#!/usr/bin/env python3
# =============================================================================
# scripts/sql_repl.py - Interactive SQL Workspace in the Terminal
# =============================================================================
# Drives a WorkspaceSession directly: edit and run SQL, chat with the
# assistant, and run the SQL blocks it suggests.
#
# Usage:
#   python scripts/sql_repl.py
#
# Commands:
#   /quit or /exit   - Exit
#   /help            - Show help
#   /schema          - Show the schema the assistant sees
#   /buffer          - Show the editor buffer
#   /edit <sql>      - Replace the editor buffer
#   /complete        - Ask for an inline completion of the buffer
#   /accept          - Append the last completion to the buffer
#   /run             - Run the editor buffer
#   /sql <sql>       - Put <sql> in the editor and run it
#   /blocks          - List SQL blocks from the last assistant reply
#   /runblock <n>    - Run block n (it replaces the editor buffer)
#   /table           - Show the results view
#   anything else    - Chat with the assistant
# =============================================================================

import asyncio
import os
import sys

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

# Check for API key
if not os.getenv("OPENAI_API_KEY"):
    print("ERROR: OPENAI_API_KEY not found in environment")
    print("Please set it in your .env file or environment")
    sys.exit(1)

from app.dependencies import get_data_store, get_llm_client, get_schema_cache
from app.exceptions import SQLPilotException
from agents.conversation import extract_code_blocks, split_message
from core.models.chat import MessageRole
from core.workspace import WorkspaceSession


def print_help():
    print(__doc__ if __doc__ else "")
    print("""
  Commands:
    /schema, /buffer, /edit <sql>, /complete, /accept,
    /run, /sql <sql>, /blocks, /runblock <n>, /table, /quit
""")


def print_table(session: WorkspaceSession, limit: int = 20):
    snapshot = session.snapshot
    names = [col.name for col in snapshot.columns]
    print(f"\n  {session.table}: {snapshot.row_count} row(s)")
    if not names:
        return
    print("  " + " | ".join(names))
    print("  " + "-+-".join("-" * len(name) for name in names))
    for row in snapshot.rows[:limit]:
        print("  " + " | ".join(str(row.get(name, "")) for name in names))
    if snapshot.row_count > limit:
        print(f"  ... {snapshot.row_count - limit} more")
    print()


def print_assistant(text: str):
    print("\nAssistant:")
    block_number = 0
    for segment in split_message(text):
        if segment.is_code:
            block_number += 1
            tag = f"[{block_number}] " if segment.block.executable else ""
            print(f"  {tag}```{segment.block.language}")
            for line in segment.block.code.splitlines():
                print(f"    {line}")
            print("  ```")
        else:
            for line in segment.text.splitlines():
                print(f"  {line}")
    print()


async def run_statement(session: WorkspaceSession, statement: str | None = None):
    try:
        if statement is None:
            report = await session.run_buffer()
        else:
            session.buffer.replace(statement)
            report = await session.run_buffer()
    except SQLPilotException as e:
        print(f"\n  Error: {e.message}")
        if e.suggestion:
            print(f"  {e.suggestion}")
        print()
        return

    print(f"\n  {report.human_message}")
    print_table(session)


def last_assistant_blocks(session: WorkspaceSession):
    for message in reversed(session.conversation.history):
        if message.role is MessageRole.ASSISTANT:
            return [block for block in extract_code_blocks(message.text) if block.executable]
    return []


async def main():
    """Main REPL loop."""
    session = WorkspaceSession(
        get_data_store(),
        get_llm_client(),
        get_schema_cache(),
    )

    print("\n  Loading schema and table data...")
    await session.start()
    print(f"\n  Connected. Tables: {', '.join(session.schema_cache.table_names)}")
    print_assistant(session.conversation.history[0].text)

    last_suggestion = ""

    while True:
        try:
            user_input = (await asyncio.to_thread(input, "You: ")).strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\nGoodbye!\n")
            break

        if not user_input:
            continue

        command, _, argument = user_input.partition(" ")
        command = command.lower()

        if command in ["/quit", "/exit", "/q"]:
            print("\nGoodbye!\n")
            break

        if command == "/help":
            print_help()
        elif command == "/schema":
            print(f"\n{session.schema_cache.text}\n")
        elif command == "/buffer":
            print(f"\n{session.buffer.text}\n")
        elif command == "/edit":
            session.buffer.replace(argument)
        elif command == "/complete":
            suggestion = await session.completion.trigger(session.buffer.text)
            last_suggestion = suggestion.text if suggestion else ""
            print(f"\n  {session.buffer.text}\033[2m{last_suggestion}\033[0m\n")
        elif command == "/accept":
            session.accept_suggestion(last_suggestion)
            last_suggestion = ""
            print(f"\n{session.buffer.text}\n")
        elif command == "/run":
            await run_statement(session)
        elif command == "/sql":
            await run_statement(session, argument)
        elif command == "/blocks":
            blocks = last_assistant_blocks(session)
            if not blocks:
                print("\n  No SQL blocks in the last reply.\n")
            for number, block in enumerate(blocks, start=1):
                print(f"\n  [{number}] {block.code}")
            print()
        elif command == "/runblock":
            blocks = last_assistant_blocks(session)
            try:
                block = blocks[int(argument) - 1]
            except (ValueError, IndexError):
                print(f"\n  No SQL block {argument!r}. Use /blocks to list them.\n")
                continue
            await run_statement(session, block.code)
        elif command == "/table":
            await session.refresh_snapshot()
            print_table(session)
        else:
            reply = await session.ask(user_input)
            print_assistant(reply.text)

    session.close()


if __name__ == "__main__":
    asyncio.run(main())
