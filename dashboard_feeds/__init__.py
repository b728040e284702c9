"""dashboard-feeds: merge several RSS/Atom feeds into one recent-items list."""

__version__ = "0.1.0"
__homepage__ = "https://github.com/cosmicrose/dashboard-feeds"

USER_AGENT = f"dashboard-feeds/{__version__} +{__homepage__}"
