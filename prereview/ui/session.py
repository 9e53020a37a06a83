"""
Interactive review session.

The session is a finite state machine. `transition` is a pure function over
an immutable table so every step can be tested without a terminal, and
`ReviewSession` feeds it events read from the user and performs the
resulting effects.
"""
import logging
from dataclasses import dataclass, replace
from enum import Enum
from types import MappingProxyType
from typing import Callable, List, Optional, Tuple

import click

from prereview.exceptions import GitError
from prereview.models import SessionAction, SessionOutcome, Suggestion
from prereview.services.diff_parser import DiffParser, MAX_VIEW_LINES
from prereview.services.git_service import GitService
from prereview.services.patch_service import PatchService
from prereview.ui import terminal

logger = logging.getLogger(__name__)


class Phase(Enum):
    PRESENTING = "presenting"
    CONFIRMING_SKIP = "confirming_skip"
    SUMMARY = "summary"
    AWAITING_DECISION = "awaiting_decision"
    COMMIT = "commit"
    ABORT = "abort"
    REREVIEW = "re-review"


class Event(Enum):
    FIX_APPLIED = "fix_applied"
    FIX_FAILED = "fix_failed"
    SKIP = "skip"
    VIEW = "view"
    QUIT = "quit"
    CONFIRM = "confirm"
    DECLINE = "decline"
    SUMMARY_SHOWN = "summary_shown"
    YES = "yes"
    REREVIEW = "re-review"
    OTHER = "other"


class Effect(Enum):
    NONE = "none"
    COUNT_FIXED = "count_fixed"
    COUNT_SKIPPED = "count_skipped"
    SHOW_DIFF = "show_diff"
    OFFER_SKIP = "offer_skip"
    INVALID_OPTION = "invalid_option"


TERMINAL_PHASES = frozenset({Phase.COMMIT, Phase.ABORT, Phase.REREVIEW})

TRANSITIONS = MappingProxyType({
    (Phase.PRESENTING, Event.FIX_APPLIED): (Phase.PRESENTING, Effect.COUNT_FIXED),
    (Phase.PRESENTING, Event.FIX_FAILED): (Phase.CONFIRMING_SKIP, Effect.OFFER_SKIP),
    (Phase.PRESENTING, Event.SKIP): (Phase.PRESENTING, Effect.COUNT_SKIPPED),
    (Phase.PRESENTING, Event.VIEW): (Phase.PRESENTING, Effect.SHOW_DIFF),
    (Phase.PRESENTING, Event.QUIT): (Phase.ABORT, Effect.NONE),
    (Phase.PRESENTING, Event.OTHER): (Phase.PRESENTING, Effect.INVALID_OPTION),
    (Phase.CONFIRMING_SKIP, Event.CONFIRM): (Phase.PRESENTING, Effect.COUNT_SKIPPED),
    (Phase.CONFIRMING_SKIP, Event.DECLINE): (Phase.PRESENTING, Effect.NONE),
    (Phase.CONFIRMING_SKIP, Event.OTHER): (Phase.PRESENTING, Effect.NONE),
    (Phase.SUMMARY, Event.SUMMARY_SHOWN): (Phase.AWAITING_DECISION, Effect.NONE),
    (Phase.SUMMARY, Event.OTHER): (Phase.AWAITING_DECISION, Effect.NONE),
    (Phase.AWAITING_DECISION, Event.YES): (Phase.COMMIT, Effect.NONE),
    (Phase.AWAITING_DECISION, Event.REREVIEW): (Phase.REREVIEW, Effect.NONE),
    (Phase.AWAITING_DECISION, Event.OTHER): (Phase.ABORT, Effect.NONE),
})

OUTCOME_ACTIONS = {
    Phase.COMMIT: SessionAction.COMMIT,
    Phase.ABORT: SessionAction.ABORT,
    Phase.REREVIEW: SessionAction.REREVIEW,
}


@dataclass(frozen=True)
class Snapshot:
    """Position and counters of a session."""
    phase: Phase
    index: int = 0
    fixed: int = 0
    skipped: int = 0

    def remaining(self, total: int) -> int:
        return total - self.fixed - self.skipped


def start(total: int) -> Snapshot:
    """Initial snapshot; an empty suggestion list commits straight away."""
    return Snapshot(phase=Phase.COMMIT if total == 0 else Phase.PRESENTING)


def transition(snapshot: Snapshot, event: Event, total: int) -> Tuple[Snapshot, Effect]:
    """
    Compute the next snapshot for an event.

    Events the current phase does not handle are treated as Event.OTHER.
    Counting effects advance to the next suggestion, and moving past the last
    one enters the summary phase.

    Args:
        snapshot: Current snapshot.
        event: What happened.
        total: Number of suggestions in the session.

    Returns:
        Tuple of (next snapshot, effect to perform).
    """
    if snapshot.phase in TERMINAL_PHASES:
        raise ValueError(f"Session already finished in {snapshot.phase.value}")

    key = (snapshot.phase, event)
    if key not in TRANSITIONS:
        key = (snapshot.phase, Event.OTHER)
    phase, effect = TRANSITIONS[key]
    nxt = replace(snapshot, phase=phase)

    if effect == Effect.COUNT_FIXED:
        nxt = replace(nxt, fixed=nxt.fixed + 1, index=nxt.index + 1)
    elif effect == Effect.COUNT_SKIPPED:
        nxt = replace(nxt, skipped=nxt.skipped + 1, index=nxt.index + 1)

    if nxt.phase == Phase.PRESENTING and nxt.index >= total:
        nxt = replace(nxt, phase=Phase.SUMMARY)
    return nxt, effect


def read_line(prompt: str) -> Optional[str]:
    """Read one answer from the terminal, None on end of input."""
    try:
        return click.prompt(prompt, default="", show_default=False, prompt_suffix="")
    except (click.Abort, EOFError):
        return None


def _normalize(answer: Optional[str]) -> Optional[str]:
    return None if answer is None else answer.strip().lower()


class ReviewSession:
    """Walks the user through suggestions one at a time."""

    def __init__(
        self,
        suggestions: List[Suggestion],
        patcher: Optional[PatchService] = None,
        git: Optional[GitService] = None,
        read_input: Callable[[str], Optional[str]] = read_line,
    ):
        self.suggestions = list(suggestions)
        self.git = git or GitService()
        self.patcher = patcher or PatchService(git=self.git)
        self.read_input = read_input
        self.diff_parser = DiffParser()
        self.snapshot = start(len(self.suggestions))

    @property
    def total(self) -> int:
        return len(self.suggestions)

    def run(self) -> SessionOutcome:
        """
        Run the session until the user commits, aborts or asks for a re-review.

        Returns:
            SessionOutcome with the fixed and skipped counts.
        """
        while self.snapshot.phase not in TERMINAL_PHASES:
            current = self.snapshot
            event = self._next_event(current)
            self.snapshot, effect = transition(current, event, self.total)
            self._perform(effect, current)

        return SessionOutcome(
            action=OUTCOME_ACTIONS[self.snapshot.phase],
            fixed=self.snapshot.fixed,
            skipped=self.snapshot.skipped,
        )

    def _next_event(self, snapshot: Snapshot) -> Event:
        if snapshot.phase == Phase.PRESENTING:
            suggestion = self.suggestions[snapshot.index]
            terminal.print_suggestion(suggestion, snapshot.index + 1, self.total)
            answer = _normalize(self.read_input(
                f"\n  {terminal.option('f')}ix | {terminal.option('s')}kip | "
                f"{terminal.option('v')}iew diff | {terminal.option('q')}uit: "
            ))
            if answer is None or answer in ("q", "quit"):
                return Event.QUIT
            if answer in ("f", "fix"):
                return self._apply(suggestion)
            if answer in ("s", "skip"):
                return Event.SKIP
            if answer in ("v", "view"):
                return Event.VIEW
            return Event.OTHER

        if snapshot.phase == Phase.CONFIRMING_SKIP:
            answer = _normalize(self.read_input("  Skip this suggestion? [y/n]: "))
            return Event.CONFIRM if answer in ("y", "yes") else Event.DECLINE

        if snapshot.phase == Phase.SUMMARY:
            terminal.print_summary(snapshot.fixed, snapshot.skipped, snapshot.remaining(self.total))
            return Event.SUMMARY_SHOWN

        answer = _normalize(self.read_input(
            f"\nProceed with commit? {terminal.option('y')}es | {terminal.option('n')}o | "
            f"{terminal.option('r')}e-review: "
        ))
        if answer in ("y", "yes"):
            return Event.YES
        if answer in ("r", "re-review", "rereview"):
            return Event.REREVIEW
        return Event.OTHER

    def _apply(self, suggestion: Suggestion) -> Event:
        result = self.patcher.apply(suggestion)
        if result.warning:
            terminal.warning(f"  {result.warning}")
        if result.applied:
            return Event.FIX_APPLIED
        logger.debug("Fix for %s not applied: %s", suggestion.file_path, result.message)
        return Event.FIX_FAILED

    def _perform(self, effect: Effect, previous: Snapshot) -> None:
        if effect == Effect.COUNT_FIXED:
            terminal.success("  ✓ Applied fix")
        elif effect == Effect.COUNT_SKIPPED:
            terminal.muted("  ⏭ Skipped")
        elif effect == Effect.OFFER_SKIP:
            terminal.warning("  ⚠ Could not apply fix automatically")
        elif effect == Effect.SHOW_DIFF:
            self.view_diff(self.suggestions[previous.index])
        elif effect == Effect.INVALID_OPTION:
            terminal.muted("  Invalid option. Use f, s, v, or q.")

    def view_diff(self, suggestion: Suggestion) -> None:
        """Print the staged diff of the suggestion's file, truncated."""
        terminal.echo()
        try:
            diff = self.git.staged_diff(suggestion.file_path, color=True)
        except GitError as e:
            terminal.muted(f"  Could not retrieve diff: {e}")
            return

        if not diff.strip():
            terminal.muted("  No staged changes for this file")
            return

        terminal.info(f"  Diff for {suggestion.file_path}")
        terminal.echo()
        lines, omitted = self.diff_parser.truncate(diff, MAX_VIEW_LINES)
        for line in lines:
            terminal.echo(f"  {line}")
        if omitted:
            terminal.muted(
                f"  ... ({omitted} more lines, use 'git diff --cached {suggestion.file_path}' to see full diff)"
            )
        terminal.echo()
