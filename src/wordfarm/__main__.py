"""Main entry point for the word farm."""
import asyncio
import logging
import sys

from wordfarm.app import WordFarm
from wordfarm.config import ensure_directories, settings
from wordfarm.logging_config import setup_logging
from wordfarm.monitoring import start_monitoring

logger = logging.getLogger(__name__)


async def main(argv: list[str]) -> int:
    """Load the farm, report progress and optionally write an export."""
    farm = WordFarm()
    try:
        await farm.start()

        stats = farm.statistics()
        logger.info(
            f"Words: {stats.total_words} total, {stats.learned_words} learned, "
            f"{stats.unlearned_words} unlearned, {stats.review_words} need review"
        )
        logger.info(f"Plots: {stats.planted_plots} planted, {stats.mastered_plots} mastered")

        if argv and argv[0] == "export":
            selected_ids = [int(word_id) for word_id in argv[1:]]
            path = farm.write_export(selected_ids)
            logger.info(f"Exported word list to {path}")
        return 0
    finally:
        await farm.stop()


def run() -> None:
    """Set up the environment and run the farm from the command line."""
    # Ensure all required directories exist
    ensure_directories()

    setup_logging("Starting WordFarm ...")

    if settings.monitoring.enabled:
        start_monitoring(settings.monitoring.port)

    try:
        sys.exit(asyncio.run(main(sys.argv[1:])))
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt, shutting down...")


if __name__ == "__main__":
    run()
