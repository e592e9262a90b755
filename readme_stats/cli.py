from __future__ import annotations

import logging
import sys

from .config import AppConfig, load_config
from .github_api import GitHubSession
from .render import load_template, render_document, write_output
from .stats import collect_stats

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s - %(message)s"


def _configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format=_LOG_FORMAT,
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


def run(config: AppConfig) -> None:
    with GitHubSession.create(config.github) as session:
        summary = collect_stats(session, config)
    content = render_document(load_template(config.output.template), summary)
    write_output(config.output.path, content)


def main() -> int:
    try:
        config = load_config()
    except Exception:
        _configure_logging()
        logger.exception("Error loading configuration")
        return 1

    _configure_logging(config.logging.level)

    try:
        run(config)
    except Exception:
        logger.exception("Error updating README file")
        return 1

    logger.info("README file updated successfully.")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
