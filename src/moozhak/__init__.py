"""moozhak - query Discogs and friends from the command line."""

__version__ = "2.0.0"
