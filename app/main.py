"""Application entry point: replay a recorded event stream through the engine."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from datetime import datetime
from pathlib import Path

# Ensure project root is on the path when running as `python app/main.py`
_ROOT = Path(__file__).parent.parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.config import Config
from app.replay import replay


def _configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Focus sentinel session replay")
    parser.add_argument("events", type=Path, help="JSON-lines file of recorded frame/audio/visibility events")
    parser.add_argument("--config", type=Path, default=None, help="JSON configuration file")
    parser.add_argument("--out", type=Path, default=None, help="session output directory")
    parser.add_argument("-v", "--verbose", action="store_true", help="log every gate decision")
    args = parser.parse_args(argv)

    _configure_logging(args.verbose)
    logger = logging.getLogger(__name__)

    config = Config.load(args.config)
    session_id = datetime.now().strftime("%Y-%m-%d_%H-%M-%S") + "_replay"
    session_dir = args.out or Path(config.runs_dir) / session_id

    try:
        with open(args.events, encoding="utf-8") as fh:
            record = replay(fh, config, session_id=session_id, session_dir=session_dir)
    except OSError as exc:
        logger.error("Cannot read %s: %s", args.events, exc)
        return 1

    print(json.dumps(record, indent=2))
    logger.info("Session written to %s", session_dir)
    return 0


if __name__ == "__main__":
    sys.exit(main())
