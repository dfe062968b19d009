"""Anchor scheduler: picks the next card and chains between anchor words."""
import logging
import random
from dataclasses import replace
from typing import Callable, List, Optional, Tuple, Union

from bigbean import monitoring
from bigbean.config import SchedulerSettings, settings
from bigbean.models.session_models import (
    Card,
    ProgressStats,
    SessionComplete,
    SessionSnapshot,
    SessionState,
    WordCandidate,
)
from bigbean.services import history
from bigbean.services.graph_service import GraphService
from bigbean.services.history import AdvanceCommand
from bigbean.services.vocabulary_store import VocabularyStore

logger = logging.getLogger(__name__)

CardResult = Union[Card, SessionComplete]


class SchedulingError(RuntimeError):
    """Raised when an anchor is selected that has no combo to show."""


class AnchorScheduler:
    """Drills one anchor word for a few cards, then chains to the next one.

    The scheduler holds no session state of its own: every operation takes a
    SessionState and returns the new one. Word.learnt in the store is the
    only thing it writes.
    """

    def __init__(
        self,
        store: VocabularyStore,
        graph: GraphService,
        rng: Optional[random.Random] = None,
        scheduler_settings: Optional[SchedulerSettings] = None,
    ):
        """Initialize the scheduler with its store and a built graph."""
        self.store = store
        self.graph = graph
        self.settings = scheduler_settings or settings.scheduler
        self.rng = rng if rng is not None else random.Random(self.settings.seed)

    def _choose_best(
        self,
        candidates: List[WordCandidate],
        key: Callable[[WordCandidate], tuple],
    ) -> Optional[WordCandidate]:
        """Pick randomly among the candidates sharing the lowest key."""
        if not candidates:
            return None
        best_key = min(key(candidate) for candidate in candidates)
        best = [candidate for candidate in candidates if key(candidate) == best_key]
        return self.rng.choice(best)

    def choose_chained_anchor(self, combo_id: str, previous_anchor: str) -> Optional[str]:
        """Choose the next anchor among the other members of the combo just shown."""
        word_ids = [
            word_id
            for word_id in self.store.list_members_of(combo_id)
            if word_id != previous_anchor
        ]
        if not word_ids:
            logger.debug(f"No chain candidates in {combo_id}")
            return None

        # Unlearnt base words, highest degree first
        candidates = self.store.list_base_word_candidates(word_ids=word_ids, learnt=False)
        chosen = self._choose_best(candidates, key=lambda c: (-c.degree,))
        if chosen:
            logger.debug(f"Chained to unlearnt base word {chosen.word_id}")
            return chosen.word_id

        # Any base word
        candidates = self.store.list_base_word_candidates(word_ids=word_ids)
        chosen = self._choose_best(candidates, key=lambda c: (c.learnt, -c.degree))
        if chosen:
            logger.debug(f"Chained to base word {chosen.word_id}")
            return chosen.word_id

        # Any word at all
        candidates = self.store.list_word_candidates(word_ids=word_ids)
        chosen = self._choose_best(candidates, key=lambda c: (c.learnt,))
        if chosen:
            logger.debug(f"Chained to word {chosen.word_id}")
            return chosen.word_id

        return None

    def choose_cold_start_anchor(self) -> Optional[str]:
        """Choose the unlearnt base word with the most combos, or None if all are learnt."""
        candidates = self.store.list_base_word_candidates(learnt=False)
        chosen = self._choose_best(candidates, key=lambda c: (-c.degree,))
        return chosen.word_id if chosen else None

    def card_budget(self, anchor: str) -> int:
        """Get the number of cards to show for a new anchor."""
        degree = self.graph.degree(anchor)
        if degree == 0:
            monitoring.scheduling_errors.inc()
            logger.error(f"Anchor {anchor} has no combos")
            raise SchedulingError(f"Anchor {anchor} has no combos")
        return min(degree, self.settings.max_cards_per_anchor)

    def choose_combo(
        self,
        anchor: str,
        shown: frozenset,
        anchor_card_count: int,
        max_cards_for_anchor: int,
    ) -> str:
        """Choose a combo for the anchor, avoiding the ones already shown."""
        # The last card leans towards a well-connected partner to chain from
        if anchor_card_count >= max_cards_for_anchor - 1:
            scored = self.store.list_partner_degrees(
                anchor,
                exclude=shown,
                min_degree=self.settings.min_partner_degree,
            )
            if scored:
                top_degree = scored[0][1]
                best = [combo_id for combo_id, degree in scored if degree == top_degree]
                return self.rng.choice(best)

        unshown = self.store.list_combos_containing(anchor, exclude=shown)
        if unshown:
            return self.rng.choice(unshown)

        combo_ids = self.store.list_combos_containing(anchor)
        if combo_ids:
            logger.debug(f"Every combo of {anchor} was shown, repeating one")
            return self.rng.choice(combo_ids)

        monitoring.scheduling_errors.inc()
        logger.error(f"Anchor {anchor} has no combos")
        raise SchedulingError(f"Anchor {anchor} has no combos")

    def next_card(self, state: SessionState) -> Tuple[SessionState, CardResult]:
        """Select the card that follows the given state.

        Keeps the current anchor until its budget is spent, then chains from
        the card on screen, then falls back to a cold start. Does not touch
        learnt flags or history.
        """
        anchor = state.current_anchor
        if anchor is not None and not state.anchor_exhausted:
            anchor_card_count = state.anchor_card_count
            max_cards = state.max_cards_for_anchor
            shown = state.shown_combos_for_anchor
        else:
            # Exhaustion is global, the chain ladder alone never ends a session
            anchor = None
            if self.store.count_unlearnt() > 0:
                if state.current_card is not None and state.current_anchor is not None:
                    anchor = self.choose_chained_anchor(
                        state.current_card.combo_id, state.current_anchor
                    )
                    source = "chain"
                if anchor is None:
                    anchor = self.choose_cold_start_anchor()
                    source = "cold_start"
            if anchor is None:
                monitoring.session_completions.inc()
                logger.info("No unlearnt base word left, session complete")
                return state.restore(SessionSnapshot(), state.history), SessionComplete()

            max_cards = self.card_budget(anchor)
            anchor_card_count = 0
            shown = frozenset()
            monitoring.anchors_started.labels(source=source).inc()
            logger.info(f"New anchor {anchor} ({source}), budget {max_cards}")

        combo_id = self.choose_combo(anchor, shown, anchor_card_count, max_cards)
        combo = self.store.get_combo(combo_id)
        card = Card(
            combo_id=combo_id,
            display_text=combo.display_text,
            image_path=combo.image_path,
            member_word_ids=tuple(self.store.list_members_of(combo_id)),
            anchor=anchor,
            max_cards_for_anchor=max_cards,
            anchor_card_count=anchor_card_count + 1,
        )
        monitoring.cards_shown.inc()

        new_state = replace(
            state,
            current_anchor=anchor,
            anchor_card_count=anchor_card_count + 1,
            max_cards_for_anchor=max_cards,
            shown_combos_for_anchor=shown | {combo_id},
            current_card=card,
        )
        return new_state, card

    def start(self) -> Tuple[SessionState, CardResult]:
        """Start a fresh session with a cold-start card."""
        return self.next_card(SessionState())

    def advance(self, state: SessionState) -> Tuple[SessionState, CardResult]:
        """Move past the card on screen, marking an exhausted anchor as learnt."""
        if state.current_card is None:
            return self.next_card(state)

        learnt_word = None
        if state.anchor_exhausted:
            word = self.store.get_word(state.current_anchor)
            if word is not None and not word.learnt:
                self.store.set_learnt(state.current_anchor, True)
                learnt_word = state.current_anchor
                monitoring.words_learnt.inc()
                logger.info(f"Word {learnt_word} marked as learnt")

        command = AdvanceCommand(previous=state.snapshot(), learnt_word=learnt_word)
        try:
            new_state, result = self.next_card(state)
        except Exception:
            # Nothing was pushed, so the flip has to be undone here
            if learnt_word is not None:
                logger.warning(f"Advance failed, unmarking {learnt_word}")
                self.store.set_learnt(learnt_word, False)
            raise

        new_history = history.push(state.history, command, limit=self.settings.history_limit)
        return replace(new_state, history=new_history), result

    def retreat(self, state: SessionState) -> SessionState:
        """Undo the last advance. Without history the state is returned as is."""
        command, remaining = history.pop(state.history)
        if command is None:
            return state

        snapshot = command.invert(self.store)
        monitoring.retreats.inc()
        return state.restore(snapshot, remaining)

    def reset(self) -> SessionState:
        """Forget all progress and return an empty session state."""
        count = self.store.reset_learnt()
        monitoring.resets.inc()
        logger.info(f"Session reset, {count} words unmarked")
        return SessionState()

    def stats(self) -> ProgressStats:
        """Get learning progress over base words."""
        return self.store.get_stats()

    def bridge(self, word_a: str, word_b: str) -> Optional[List[str]]:
        """Get the shortest chain of combos between two words."""
        return self.graph.find_bridge(word_a, word_b)
