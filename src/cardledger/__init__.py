"""cardledger: spaced-repetition scheduling and study statistics."""

from cardledger.consts import VERSION

__version__ = VERSION
