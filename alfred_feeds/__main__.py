"""Entry point for ``python -m alfred_feeds``."""

from alfred_feeds.cli import main

if __name__ == "__main__":
    main()
