"""Undo history for scheduler advances."""
import logging
from dataclasses import dataclass
from typing import Optional, Tuple

from bigbean.models.session_models import SessionSnapshot
from bigbean.services.vocabulary_store import VocabularyStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AdvanceCommand:
    """One recorded advance: the state it left and the word it marked learnt."""
    previous: SessionSnapshot
    learnt_word: Optional[str] = None

    def invert(self, store: VocabularyStore) -> SessionSnapshot:
        """Undo the advance's store mutation and return the state to restore."""
        if self.learnt_word is not None:
            store.set_learnt(self.learnt_word, False)
            logger.info(f"Word {self.learnt_word} unmarked as learnt")
        return self.previous


History = Tuple[AdvanceCommand, ...]


def push(history: History, command: AdvanceCommand, limit: Optional[int] = None) -> History:
    """Return history with command on top, dropping the oldest past limit."""
    history = history + (command,)
    if limit is not None and len(history) > limit:
        history = history[-limit:]
    return history


def pop(history: History) -> Tuple[Optional[AdvanceCommand], History]:
    """Return the top command and the remaining history; (None, ()) when empty."""
    if not history:
        return None, history
    return history[-1], history[:-1]
