"""Main entry point for the terminal session."""
import logging

from bigbean.app import BigBeanApp
from bigbean.logging_config import setup_logging

logger = logging.getLogger(__name__)


def main() -> None:
    """Run the session."""
    setup_logging("Starting BigBean ...")

    try:
        BigBeanApp().run()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    main()
