# main.py

import argparse
import asyncio
import datetime
import logging
import os
import sys

from linerun.config_handler import load_configuration
from linerun.editor import EditorUI

LOG_DIR = "logs"
CONFIG_DIR = "config"

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))
LOG_FILE = os.path.join(SCRIPT_DIR, LOG_DIR, "linerun.log")

logger = logging.getLogger(__name__)


def setup_logging():
    os.makedirs(os.path.join(SCRIPT_DIR, LOG_DIR), exist_ok=True)
    logging.basicConfig(
        level=logging.DEBUG,
        format='%(asctime)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s',
        handlers=[logging.FileHandler(LOG_FILE)]
    )


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Edit text and run the line under the cursor.")
    parser.add_argument("file", nargs="?", help="File to open at startup.")
    return parser.parse_args(argv)


async def main_async_runner(config: dict, document_path=None):
    """ Builds the editor and runs the prompt_toolkit application until it exits. """
    editor = EditorUI(config, document_path=document_path)
    app = editor.create_application()
    logger.info("linerun editor starting.")
    await app.run_async()
    logger.info("linerun editor run_async completed.")


def run_editor(argv=None):
    """ Main entry point to run the editor application. """
    setup_logging()
    args = parse_args(argv)
    logger.info("=" * 80)
    logger.info("  linerun Session Started")
    logger.info(f"  Timestamp: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info("=" * 80)
    try:
        config = load_configuration(os.path.join(SCRIPT_DIR, CONFIG_DIR))
        asyncio.run(main_async_runner(config, args.file))
    except (FileNotFoundError, ValueError, IOError) as e:
        print(f"\nFATAL STARTUP ERROR: {e}")
        print(f"Please ensure '{CONFIG_DIR}/default_config.json' exists and is a valid JSON file.")
        logger.critical(f"Application halting due to fatal configuration error: {e}")
    except (EOFError, KeyboardInterrupt):
        print("\nExiting linerun. 👋"); logger.info("Exiting due to EOF or KeyboardInterrupt at run_editor level.")
    except Exception as e:
        print(f"\nUnexpected critical error: {e}"); logger.critical("Critical error in run_editor or main_async_runner", exc_info=True)
    finally:
        logger.info("=" * 80)
        logger.info("  linerun Session Ended")
        logger.info(f"  Timestamp: {datetime.datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
        logger.info("=" * 80)
        logging.shutdown()


if __name__ == "__main__":
    run_editor(sys.argv[1:])
