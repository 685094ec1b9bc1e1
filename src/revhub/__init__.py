"""revhub: spaced repetition scheduling for bookmarked practice questions."""

from revhub.consts import VERSION

__version__ = VERSION
