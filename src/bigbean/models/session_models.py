"""Value objects passed between the scheduler and its caller."""
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, FrozenSet, Optional, Tuple

if TYPE_CHECKING:
    from bigbean.services.history import AdvanceCommand


@dataclass(frozen=True)
class WordCandidate:
    """A word row as returned by the store, with its combo degree."""
    word_id: str
    degree: int
    learnt: bool


@dataclass(frozen=True)
class ProgressStats:
    """Learning progress over base words."""
    total: int
    learnt: int
    unlearnt: int


@dataclass(frozen=True)
class Card:
    """A combo selected for display under an anchor."""
    combo_id: str
    display_text: str
    image_path: Optional[str]
    member_word_ids: Tuple[str, ...]
    anchor: str
    max_cards_for_anchor: int
    anchor_card_count: int  # position of this card under the anchor, 1-based


@dataclass(frozen=True)
class SessionComplete:
    """Returned instead of a card once no unlearnt base word remains."""
    message: str = "All words learnt"


@dataclass(frozen=True)
class SessionSnapshot:
    """Scheduler fields restored verbatim by a retreat."""
    current_anchor: Optional[str] = None
    anchor_card_count: int = 0
    max_cards_for_anchor: int = 0
    shown_combos_for_anchor: FrozenSet[str] = frozenset()
    current_card: Optional[Card] = None


@dataclass(frozen=True)
class SessionState(SessionSnapshot):
    """Transient per-learner session state, owned by the caller."""
    history: Tuple["AdvanceCommand", ...] = field(default_factory=tuple)

    @property
    def anchor_exhausted(self) -> bool:
        """Whether the current anchor has shown its last card."""
        return (
            self.current_anchor is not None
            and self.anchor_card_count >= self.max_cards_for_anchor
        )

    @property
    def can_retreat(self) -> bool:
        """Whether there is an advance to undo."""
        return bool(self.history)

    def snapshot(self) -> SessionSnapshot:
        """Get the undoable part of the state, without history."""
        return SessionSnapshot(
            current_anchor=self.current_anchor,
            anchor_card_count=self.anchor_card_count,
            max_cards_for_anchor=self.max_cards_for_anchor,
            shown_combos_for_anchor=self.shown_combos_for_anchor,
            current_card=self.current_card,
        )

    def restore(self, snapshot: SessionSnapshot, history: Tuple["AdvanceCommand", ...]) -> "SessionState":
        """Get a copy of the state with the snapshot and history put back."""
        return replace(
            self,
            current_anchor=snapshot.current_anchor,
            anchor_card_count=snapshot.anchor_card_count,
            max_cards_for_anchor=snapshot.max_cards_for_anchor,
            shown_combos_for_anchor=snapshot.shown_combos_for_anchor,
            current_card=snapshot.current_card,
            history=history,
        )
