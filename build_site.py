"""Convenience script for exporting the spacetraveling blog as static HTML."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import requests

# Ensure the src directory is on the Python path so the spacetraveling package can be imported
SRC_PATH = Path(__file__).resolve().parent / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from spacetraveling.config import BlogConfig  # noqa: E402  (import after path setup)
from spacetraveling.services.listing import ListingPageController  # noqa: E402
from spacetraveling.services.post import PostPageController  # noqa: E402
from spacetraveling.services.prismic import ContentClientError, PrismicClient  # noqa: E402
from spacetraveling.services.static_site import DEFAULT_EXPORT_ROOT, StaticSiteBuilder  # noqa: E402


def main(argv: list[str] | None = None) -> None:
    """Load the configuration, render every known page and write it to disk."""

    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--config", type=Path, default=None, help="Path to a JSON configuration file")
    parser.add_argument("--output", type=Path, default=DEFAULT_EXPORT_ROOT, help="Directory receiving the pages")
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(message)s")

    try:
        base = BlogConfig.from_file(args.config) if args.config else None
        config = BlogConfig.from_env(base=base)
    except (FileNotFoundError, ValueError) as exc:
        logging.error("Could not load blog configuration: %s", exc)
        sys.exit(1)

    client = PrismicClient(config)
    builder = StaticSiteBuilder(ListingPageController(client, config), PostPageController(client, config))

    try:
        written = builder.build(args.output)
    except (requests.RequestException, ContentClientError) as exc:
        logging.error("Build failed: %s", exc)
        sys.exit(1)

    logging.info("Exported %d pages to %s", len(written), args.output)


if __name__ == "__main__":
    main()
