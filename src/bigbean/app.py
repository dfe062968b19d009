"""Terminal application driving one learner session."""
import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError

from bigbean.models.base import init_db, SessionLocal
from bigbean.models.session_models import Card, SessionComplete, SessionState
from bigbean.services.anchor_scheduler import AnchorScheduler, CardResult, SchedulingError
from bigbean.services.graph_service import GraphService
from bigbean.services.vocabulary_store import VocabularyStore

HELP = "[Enter/n] next  [b] back  [r] start over  [q] quit"


class BigBeanApp:
    """Main application class."""

    def __init__(
        self,
        read: Callable[[str], str] = input,
        write: Callable[[str], None] = print,
    ):
        """Initialize the application."""
        self.read = read
        self.write = write
        self.db = None
        self.scheduler: Optional[AnchorScheduler] = None
        self.state = SessionState()
        self.running = False
        self.logger = logging.getLogger(__name__)

    def start(self) -> None:
        """Open the database and build the graph."""
        if self.running:
            return

        try:
            init_db()
            self.db = SessionLocal()
            self.logger.info("Database initialized")

            store = VocabularyStore(self.db)
            graph = GraphService(store)
            graph.build()
            self.scheduler = AnchorScheduler(store, graph)
            self.running = True

        except Exception as e:
            self.logger.error("Failed to start application: %s", str(e))
            self.stop()
            raise

    def stop(self) -> None:
        """Close the database session."""
        if self.db:
            self.db.close()
            self.db = None
            self.logger.info("Database session closed")
        self.scheduler = None
        self.running = False

    def render(self, result: Optional[CardResult]) -> None:
        """Print a card or the completion screen, followed by progress."""
        stats = self.scheduler.stats()
        if isinstance(result, Card):
            anchor = result.anchor.split("-")[0]
            self.write(
                f"Learning: {anchor} ({result.anchor_card_count}/{result.max_cards_for_anchor})"
            )
            self.write(f"  {result.display_text}")
            if result.image_path:
                self.write(f"  [{result.image_path}]")
        elif isinstance(result, SessionComplete):
            self.write(f"{result.message}! You've completed all {stats.total} base words.")
        self.write(f"{stats.unlearnt} to learn | {stats.learnt} learnt | {stats.total} total")

    def handle(self, command: str) -> bool:
        """Apply one command. Returns False when the session should end."""
        command = command.strip().lower()
        if command == "q":
            return False

        if command in ("", "n"):
            self.state, result = self.scheduler.advance(self.state)
        elif command == "b":
            if not self.state.can_retreat:
                self.write("Nothing to go back to")
                return True
            self.state = self.scheduler.retreat(self.state)
            result = self.state.current_card
        elif command == "r":
            self.state = self.scheduler.reset()
            self.state, result = self.scheduler.start()
        else:
            self.write(HELP)
            return True

        self.render(result)
        return True

    def run(self) -> None:
        """Run the interactive session until the learner quits."""
        self.start()
        try:
            self.state, result = self.scheduler.start()
            self.render(result)
            self.write(HELP)
            while True:
                try:
                    command = self.read("> ")
                except EOFError:
                    break
                try:
                    if not self.handle(command):
                        break
                except SQLAlchemyError as e:
                    self.logger.error(f"Database error: {e}")
                    self.db.rollback()
                    self.write("Something went wrong talking to the database, try again")
                except SchedulingError as e:
                    self.write(f"Could not schedule a card: {e}")
        finally:
            self.stop()

