"""dashboard-feeds - command-line entry point."""

from dashboard_feeds.cli import main

if __name__ == "__main__":
    main()
