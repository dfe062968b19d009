"""Test configuration."""
import os
import random
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from dotenv import load_dotenv
from faker import Faker

# Set test environment before any imports
os.environ["ENV"] = "test"

# Load test environment variables
test_env_path = Path(__file__).parents[3] / ".env.test"
load_dotenv(test_env_path)
os.environ.setdefault(
    "DATABASE_URL", f"sqlite:///{Path(tempfile.gettempdir()) / 'bigbean-test.db'}"
)

# Import after environment setup
from sqlalchemy.orm import Session

from bigbean.config import SchedulerSettings
from bigbean.models.base import Base, SessionLocal, engine, init_db
from bigbean.models.models import Combo, Word
from bigbean.services.anchor_scheduler import AnchorScheduler
from bigbean.services.graph_service import GraphService
from bigbean.services.vocabulary_store import VocabularyStore

fake = Faker()


class VocabularyBuilder:
    """Creates words and combos for a test vocabulary."""

    def __init__(self, db: Session):
        self.db = db

    def word(self, word_id: str, learnt: bool = False) -> Word:
        word = self.db.get(Word, word_id)
        if word is None:
            content, part_of_speech = word_id.split("-")[:2]
            word = Word(id=word_id, content=content, part_of_speech=part_of_speech, learnt=learnt)
            self.db.add(word)
        else:
            word.learnt = learnt
        self.db.commit()
        return word

    def combo(self, combo_id: str, *word_ids: str) -> Combo:
        words = [self.db.get(Word, word_id) or self.word(word_id) for word_id in word_ids]
        combo = Combo(
            id=combo_id,
            display_text=fake.sentence(nb_words=3),
            image_path=f"/images/{combo_id}.jpg",
            words=words,
        )
        self.db.add(combo)
        self.db.commit()
        return combo

    def star(self, anchor: str, count: int, prefix: str = "") -> list:
        """Give anchor `count` combos, each with its own degree-1 partner."""
        prefix = prefix or anchor.split("-")[0]
        combos = []
        for i in range(count):
            partner = f"{prefix}{i}partner-n-0"
            combos.append(self.combo(f"{prefix}-{i}-g-0", anchor, partner))
        return combos


@pytest.fixture(autouse=True)
def setup_database():
    """Drop and recreate the schema before each test."""
    engine.dispose()
    Base.metadata.drop_all(bind=engine)
    init_db()

    yield

    engine.dispose()


@pytest.fixture
def db() -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def vocab(db: Session) -> VocabularyBuilder:
    """Create a vocabulary builder."""
    return VocabularyBuilder(db)


@pytest.fixture
def store(db: Session) -> VocabularyStore:
    """Create a store with the default base word threshold."""
    return VocabularyStore(db, base_word_min_degree=4)


@pytest.fixture
def graph(store: VocabularyStore) -> GraphService:
    """Create an unbuilt graph service."""
    return GraphService(store, max_bridge_length=10)


@pytest.fixture
def make_scheduler(store: VocabularyStore, graph: GraphService):
    """Build the graph from the current data and return a seeded scheduler."""
    def _make(seed: int = 0, **overrides) -> AnchorScheduler:
        graph.build()
        scheduler_settings = SchedulerSettings(
            base_word_min_degree=4,
            max_cards_per_anchor=overrides.pop("max_cards_per_anchor", 3),
            min_partner_degree=2,
            max_bridge_length=10,
            history_limit=overrides.pop("history_limit", 500),
            seed=None,
        )
        return AnchorScheduler(
            store,
            graph,
            rng=random.Random(seed),
            scheduler_settings=scheduler_settings,
        )
    return _make
