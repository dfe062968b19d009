"""Service for reading the vocabulary graph and updating learnt flags."""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from bigbean.config import settings
from bigbean.models.models import Combo, Word, combo_map
from bigbean.models.session_models import ProgressStats, WordCandidate

logger = logging.getLogger(__name__)


class VocabularyStore:
    """Query and update primitives over words, combos and their memberships.

    Every list is returned in a deterministic order (degree descending, then
    id) so that random tie-breaks stay the caller's business.
    """

    def __init__(self, db: Session, base_word_min_degree: Optional[int] = None):
        """Initialize the store with a database session."""
        self.db = db
        if base_word_min_degree is None:
            base_word_min_degree = settings.scheduler.base_word_min_degree
        self.base_word_min_degree = base_word_min_degree

    def get_word(self, word_id: str) -> Optional[Word]:
        """Get a word by its ID."""
        return self.db.query(Word).filter(Word.id == word_id).first()

    def get_combo(self, combo_id: str) -> Optional[Combo]:
        """Get a combo by its ID."""
        return self.db.query(Combo).filter(Combo.id == combo_id).first()

    def get_combo_details(self, combo_id: str) -> Optional[Dict[str, Any]]:
        """Get a combo together with its member words."""
        combo = self.get_combo(combo_id)
        if not combo:
            return None

        words = (
            self.db.query(Word)
            .join(combo_map, combo_map.c.word_id == Word.id)
            .filter(combo_map.c.combo_id == combo_id)
            .order_by(Word.id)
            .all()
        )
        return {
            "combo": combo,
            "words": words,
        }

    def list_word_candidates(
        self,
        word_ids: Optional[Iterable[str]] = None,
        learnt: Optional[bool] = None,
        min_degree: int = 0,
    ) -> List[WordCandidate]:
        """List words with their combo degree, highest degree first."""
        degree = func.count(combo_map.c.combo_id)
        query = (
            self.db.query(Word.id, Word.learnt, degree.label("degree"))
            .outerjoin(combo_map, combo_map.c.word_id == Word.id)
            .group_by(Word.id, Word.learnt)
        )

        if word_ids is not None:
            word_ids = list(word_ids)
            if not word_ids:
                return []
            query = query.filter(Word.id.in_(word_ids))
        if learnt is not None:
            query = query.filter(Word.learnt == learnt)
        if min_degree:
            query = query.having(degree >= min_degree)

        rows = query.order_by(degree.desc(), Word.id).all()
        return [
            WordCandidate(word_id=row.id, degree=row.degree, learnt=bool(row.learnt))
            for row in rows
        ]

    def list_base_word_candidates(
        self,
        word_ids: Optional[Iterable[str]] = None,
        learnt: Optional[bool] = None,
    ) -> List[WordCandidate]:
        """List base words (degree at or above the threshold)."""
        return self.list_word_candidates(
            word_ids=word_ids,
            learnt=learnt,
            min_degree=self.base_word_min_degree,
        )

    def list_combos_containing(
        self, word_id: str, exclude: Iterable[str] = ()
    ) -> List[str]:
        """List the ids of combos containing a word."""
        query = (
            self.db.query(combo_map.c.combo_id)
            .filter(combo_map.c.word_id == word_id)
        )

        exclude = list(exclude)
        if exclude:
            query = query.filter(combo_map.c.combo_id.notin_(exclude))

        return [row.combo_id for row in query.order_by(combo_map.c.combo_id).all()]

    def list_partner_degrees(
        self,
        word_id: str,
        exclude: Iterable[str] = (),
        min_degree: int = 0,
    ) -> List[Tuple[str, int]]:
        """List combos of a word scored by the best degree among their other members.

        Partners below ``min_degree`` are ignored, so a combo whose other
        members are all below it does not appear at all.
        """
        word_degree = (
            select(
                combo_map.c.word_id.label("word_id"),
                func.count(combo_map.c.combo_id).label("degree"),
            )
            .group_by(combo_map.c.word_id)
            .subquery()
        )
        anchor_map = combo_map.alias("anchor_map")
        partner_map = combo_map.alias("partner_map")
        best = func.max(word_degree.c.degree)

        query = (
            self.db.query(anchor_map.c.combo_id, best.label("partner_degree"))
            .join(
                partner_map,
                and_(
                    partner_map.c.combo_id == anchor_map.c.combo_id,
                    partner_map.c.word_id != anchor_map.c.word_id,
                ),
            )
            .join(word_degree, word_degree.c.word_id == partner_map.c.word_id)
            .filter(
                anchor_map.c.word_id == word_id,
                word_degree.c.degree >= min_degree,
            )
        )

        exclude = list(exclude)
        if exclude:
            query = query.filter(anchor_map.c.combo_id.notin_(exclude))

        rows = (
            query.group_by(anchor_map.c.combo_id)
            .order_by(best.desc(), anchor_map.c.combo_id)
            .all()
        )
        return [(row.combo_id, row.partner_degree) for row in rows]

    def list_members_of(self, combo_id: str) -> List[str]:
        """List the ids of words in a combo."""
        rows = (
            self.db.query(combo_map.c.word_id)
            .filter(combo_map.c.combo_id == combo_id)
            .order_by(combo_map.c.word_id)
            .all()
        )
        return [row.word_id for row in rows]

    def list_memberships(self) -> List[Tuple[str, str]]:
        """List every (word_id, combo_id) membership row."""
        rows = self.db.query(combo_map.c.word_id, combo_map.c.combo_id).all()
        return [(row.word_id, row.combo_id) for row in rows]

    def set_learnt(self, word_id: str, learnt: bool) -> None:
        """Set a word's learnt flag."""
        word = self.get_word(word_id)
        if not word:
            raise ValueError(f"Word {word_id} not found")

        word.learnt = learnt
        self.db.commit()
        logger.debug(f"Word {word_id} learnt={learnt}")

    def reset_learnt(self) -> int:
        """Clear every learnt flag. Returns the number of words touched."""
        count = (
            self.db.query(Word)
            .filter(Word.learnt == True)
            .update({Word.learnt: False}, synchronize_session="fetch")
        )
        self.db.commit()
        return count

    def count_base_words(self) -> int:
        """Get the number of base words."""
        return len(self.list_base_word_candidates())

    def count_learnt(self) -> int:
        """Get the number of learnt base words."""
        return len(self.list_base_word_candidates(learnt=True))

    def count_unlearnt(self) -> int:
        """Get the number of base words not learnt yet."""
        return len(self.list_base_word_candidates(learnt=False))

    def get_stats(self) -> ProgressStats:
        """Get learning progress over base words."""
        candidates = self.list_base_word_candidates()
        learnt = sum(1 for candidate in candidates if candidate.learnt)
        return ProgressStats(
            total=len(candidates),
            learnt=learnt,
            unlearnt=len(candidates) - learnt,
        )
