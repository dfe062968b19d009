"""Database models for the vocabulary graph."""
from enum import Enum

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    String,
    Table,
)
from sqlalchemy.orm import relationship

from bigbean.models.base import Base, TimestampMixin


class PartOfSpeech(str, Enum):
    """Closed set of part-of-speech tags used in word ids."""
    NOUN = "n"
    VERB = "v"
    ADJECTIVE = "j"
    PHRASAL_VERB = "pv"


def make_word_id(lemma: str, part_of_speech: PartOfSpeech, variant: int = 0) -> str:
    """Build a stable word id such as ``apple-n-0``."""
    slug = "-".join(lemma.lower().split())
    return f"{slug}-{PartOfSpeech(part_of_speech).value}-{variant}"


# Word <-> Combo membership, the edges of the bipartite graph
combo_map = Table(
    "combo_map",
    Base.metadata,
    Column("combo_id", String, ForeignKey("combos.id", ondelete="CASCADE"), primary_key=True),
    Column("word_id", String, ForeignKey("words.id", ondelete="CASCADE"), primary_key=True),
    Index("idx_combo_map_word", "word_id"),
)


class Word(Base, TimestampMixin):
    """Word model."""

    __tablename__ = "words"

    id = Column(String, primary_key=True)  # e.g. "apple-n-0"
    content = Column(String, nullable=False)
    part_of_speech = Column(String, nullable=False)
    learnt = Column(Boolean, default=False, nullable=False)

    # Relationships
    combos = relationship(
        "Combo",
        secondary=combo_map,
        back_populates="words",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Word {self.id} learnt={self.learnt}>"


class Combo(Base, TimestampMixin):
    """Flashcard built from two or more words."""

    __tablename__ = "combos"

    id = Column(String, primary_key=True)  # e.g. "green-apple-g-0"
    display_text = Column(String, nullable=False)
    image_path = Column(String)

    # Relationships
    words = relationship(
        "Word",
        secondary=combo_map,
        back_populates="combos",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Combo {self.id}>"
