"""Tiny terminal UI helpers (prompt_toolkit-based).

Kept apart from the review logic so the prompt can be driven headlessly in
tests through a ``PromptSession`` built on a pipe input.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.validation import ValidationError, Validator


def _best_prefix_match(words: Sequence[str], text: str) -> str | None:
    """First word starting with ``text`` (case-insensitive), unless one equals it."""

    if not text:
        return None
    lower = text.lower()
    for w in words:
        if w.lower() == lower:
            return None
    for w in words:
        if w.lower().startswith(lower):
            return w
    return None


class _KnownNameValidator(Validator):
    def __init__(self, allowed_lower: set[str]) -> None:
        self._allowed_lower = allowed_lower

    def validate(self, document) -> None:
        text = document.text.strip()
        if text and text.lower() not in self._allowed_lower:
            raise ValidationError(message="Select a category from the list.")


def select_category(
    names: Sequence[str] | Iterable[str],
    *,
    default: str,
    message: str = "Category (Enter to accept): ",
    session: PromptSession | None = None,
) -> str:
    """Prompt for one of ``names`` with ``default`` pre-filled.

    Completion matches anywhere in a name, ignoring case. Enter on a strict
    prefix accepts the first matching name; Enter on an empty buffer accepts
    ``default``. The returned value is always the canonical spelling from
    ``names`` (or ``default``).
    """

    words = list(names)
    canonical = {w.lower(): w for w in words}
    completer = WordCompleter(words, ignore_case=True, match_middle=True, sentence=True)

    kb = KeyBindings()

    @kb.add("tab", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cand = _best_prefix_match(words, b.document.text)
        if cand:
            b.insert_text(cand[len(b.document.text) :])
        elif b.complete_state is None:
            b.start_completion(select_first=True)
        else:
            b.complete_next()

    @kb.add("enter", eager=True)
    def _(event) -> None:  # pragma: no cover - integration path
        b = event.app.current_buffer
        cs = b.complete_state
        if cs is not None and cs.current_completion is not None:
            b.apply_completion(cs.current_completion)
        else:
            cand = _best_prefix_match(words, b.document.text)
            if cand:
                b.insert_text(cand[len(b.document.text) :])
        b.validate_and_handle()

    if session is None:
        sess: PromptSession = PromptSession(key_bindings=kb)
    else:
        sess = PromptSession(
            input=getattr(session, "input", None),
            output=getattr(session, "output", None),
            key_bindings=kb,
        )

    result = sess.prompt(
        message,
        default=default,
        completer=completer,
        validator=_KnownNameValidator(set(canonical)),
        validate_while_typing=False,
        key_bindings=kb,
    ).strip()
    if not result:
        return default
    return canonical.get(result.lower(), result)


__all__ = ["select_category"]
