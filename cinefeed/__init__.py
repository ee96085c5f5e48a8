"""CineFeed: personalized movie and TV feed over the TMDB catalog."""

from cinefeed.app import CineFeed

__version__ = "0.1.0"

__all__ = ["CineFeed", "__version__"]
