# =============================================================================
# agents/completion_engine.py - Inline SQL Completion
# =============================================================================
# Turns editor content into a single suggested continuation (ghost text).
#
# Two layers:
# 1. request_completion(): one LLM call + normalization. Stateless.
# 2. InlineCompletionEngine: per-editor state machine that debounces
#    keystrokes and makes sure only the latest request can surface.
#
# State machine (per editor session):
#   idle --keystroke--> debouncing --timer fires--> requesting --> idle
#   Any keystroke while debouncing cancels the timer and starts a new one.
#   trigger() skips the timer and issues immediately.
#
# "Last request wins": every request gets a fresh id from the engine's
# generation counter. A response whose id is not the outstanding one is
# dropped without any effect. A keystroke clears the outstanding id, so a
# response computed for older text never surfaces. In-flight LLM calls are
# never cancelled, only ignored.
#
# Usage:
#   engine = InlineCompletionEngine(fetch=make_llm_fetcher(llm), on_suggestion=push)
#   engine.buffer_changed("SELECT", cursor=6)
# =============================================================================

from __future__ import annotations

import asyncio
import inspect
import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any

from app.config import settings
from app.exceptions import InputValidationError
from agents.prompts.context_builder import (
    ContextKind,
    build_completion_user_message,
    build_context,
)
from core.models.completion import (
    CompletionRequest,
    CompletionState,
    CompletionSuggestion,
)

logger = logging.getLogger(__name__)

_LEADING_DECORATION = re.compile(r'^["\-*]+')
_TRAILING_DECORATION = re.compile(r'["\s]+$')

CompletionFetcher = Callable[[CompletionRequest], Awaitable[str]]
SuggestionCallback = Callable[[CompletionSuggestion], Any]


# =============================================================================
# Normalization
# =============================================================================

def normalize_suggestion(raw: str | None, typed: str) -> str:
    """
    Clean a raw model suggestion so it can be inserted after `typed`.

    - strip leading quote/dash/asterisk decoration (leading spaces are kept)
    - strip trailing quotes and whitespace
    - drop a repeated prefix if the model echoed the user's text, together
      with any whitespace in front of the echo
    - make sure a non-empty suggestion starts with a space

    Example:
        normalize_suggestion("SELECT * FROM t;", "select") -> " * FROM t;"
        normalize_suggestion(" * FROM t;", "SELECT")       -> " * FROM t;"
        normalize_suggestion("\\nSELECT * FROM t;", "SELECT") -> " * FROM t;"
    """
    if not raw:
        return ""

    suggestion = _LEADING_DECORATION.sub("", raw)
    suggestion = _TRAILING_DECORATION.sub("", suggestion)

    echoed = suggestion.lstrip()
    if typed and echoed.casefold().startswith(typed.casefold()):
        suggestion = echoed[len(typed):]

    if suggestion and not suggestion.startswith(" "):
        suggestion = " " + suggestion

    return suggestion


# =============================================================================
# Single Completion Call
# =============================================================================

async def request_completion(
    llm: Any,
    partial_query: str | None,
    cursor_position: int | None = None,
    schema_text: str | None = None,
) -> str:
    """
    Ask the LLM for one continuation of `partial_query`.

    Returns "" when the model has nothing to add. Upstream errors propagate;
    the engine (not this function) decides to swallow them.

    Raises:
        InputValidationError: If partial_query is missing or empty
    """
    if not partial_query:
        raise InputValidationError("Partial query is required", field="partialQuery")

    cursor = len(partial_query) if cursor_position is None else cursor_position
    system = build_context(ContextKind.COMPLETION, schema_text)

    reply = await llm.complete(
        system,
        [{"role": "user", "content": build_completion_user_message(partial_query, cursor)}],
        temperature=settings.COMPLETION_TEMPERATURE,
        max_tokens=settings.COMPLETION_MAX_TOKENS,
    )

    if not reply.content or not reply.content.strip():
        return ""

    suggestion = normalize_suggestion(reply.content, partial_query)
    logger.debug(f"Completion for {partial_query[-40:]!r}: {suggestion!r}")
    return suggestion


def make_llm_fetcher(llm: Any) -> CompletionFetcher:
    """Adapt request_completion() to the engine's fetch signature."""

    async def fetch(request: CompletionRequest) -> str:
        return await request_completion(
            llm,
            request.buffer_text,
            request.cursor_offset,
            request.schema_snapshot,
        )

    return fetch


# =============================================================================
# Per-Editor Engine
# =============================================================================

class InlineCompletionEngine:
    """
    Debounced, supersession-safe completion for one editor session.

    Args:
        fetch: Coroutine function (CompletionRequest) -> suggestion text
        delay: Debounce delay in seconds (default from settings)
        on_suggestion: Called with every surfaced CompletionSuggestion;
            may be a plain function or a coroutine function
        schema_provider: Returns the current schema text at issue time

    Attributes:
        state: Current CompletionState
        outstanding_id: Id of the only request whose response may surface
    """

    def __init__(
        self,
        fetch: CompletionFetcher,
        delay: float | None = None,
        on_suggestion: SuggestionCallback | None = None,
        schema_provider: Callable[[], str] | None = None,
    ):
        self.fetch = fetch
        self.delay = settings.completion_debounce_seconds if delay is None else delay
        self.on_suggestion = on_suggestion
        self.schema_provider = schema_provider or (lambda: "")

        self.state = CompletionState.IDLE
        self.outstanding_id: int | None = None
        self._generation = 0
        self._timer: asyncio.Task | None = None
        # Debounce tasks keep running as requests after the timer fires
        self._tasks: set[asyncio.Task] = set()
        self._text = ""
        self._cursor = 0

    # -------------------------------------------------------------------------
    # Editor Events
    # -------------------------------------------------------------------------

    def buffer_changed(self, text: str, cursor: int | None = None) -> None:
        """
        Record new editor content and restart the debounce timer.

        Must be called from within a running event loop.
        """
        self._text = text
        self._cursor = len(text) if cursor is None else cursor

        self._cancel_timer()
        # New text makes any in-flight response stale
        self.outstanding_id = None
        self._timer = asyncio.create_task(self._debounce())
        self._tasks.add(self._timer)
        self._timer.add_done_callback(self._task_done)
        self.state = CompletionState.DEBOUNCING

    async def trigger(
        self,
        text: str | None = None,
        cursor: int | None = None,
    ) -> CompletionSuggestion | None:
        """
        Manual trigger: skip the debounce and request immediately.

        Returns the surfaced suggestion, or None if nothing was requested
        or the response was superseded.
        """
        if text is not None:
            self._text = text
            self._cursor = len(text) if cursor is None else cursor
        elif cursor is not None:
            self._cursor = cursor

        self._cancel_timer()
        return await self._issue(self._text, self._cursor)

    def close(self) -> None:
        """Cancel the pending timer and invalidate any in-flight request."""
        self._cancel_timer()
        self.outstanding_id = None
        self.state = CompletionState.IDLE

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    @property
    def pending(self) -> bool:
        """True while a debounce timer is waiting to fire."""
        return self._timer is not None and not self._timer.done()

    def _task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(f"Completion task failed: {task.exception()}")

    def _cancel_timer(self) -> None:
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None

    async def _debounce(self) -> None:
        await asyncio.sleep(self.delay)
        # The timer has fired; from here on this task is a request, not a timer
        self._timer = None
        await self._issue(self._text, self._cursor)

    def _next_id(self) -> int:
        self._generation += 1
        return self._generation

    async def _issue(self, text: str, cursor: int) -> CompletionSuggestion | None:
        if not text.strip():
            self.state = CompletionState.IDLE
            return None

        request = CompletionRequest(
            request_id=self._next_id(),
            buffer_text=text,
            cursor_offset=max(0, min(cursor, len(text))),
            schema_snapshot=self.schema_provider(),
        )
        self.outstanding_id = request.request_id
        self.state = CompletionState.REQUESTING

        try:
            suggestion_text = await self.fetch(request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            logger.debug(f"Completion request {request.request_id} failed: {e}")
            suggestion_text = ""

        if request.request_id != self.outstanding_id:
            logger.debug(
                f"Discarding stale completion {request.request_id} "
                f"(outstanding: {self.outstanding_id})"
            )
            return None

        self.state = CompletionState.DEBOUNCING if self.pending else CompletionState.IDLE
        suggestion = CompletionSuggestion(
            request_id=request.request_id,
            text=suggestion_text or "",
        )

        if self.on_suggestion is not None:
            result = self.on_suggestion(suggestion)
            if inspect.isawaitable(result):
                await result

        return suggestion
