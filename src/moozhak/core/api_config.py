# src/moozhak/core/api_config.py

# Base URLs for APIs
DISCOGS_API_URL = "https://api.discogs.com"
DISCOGS_WEB_URL = "https://www.discogs.com"
MUSICBRAINZ_API_URL = "https://musicbrainz.org/ws/2"
GETSONGBPM_API_URL = "https://api.getsong.co"
RECCOBEATS_API_URL = "https://api.reccobeats.com/v1"

USER_AGENT = "moozhak/2.0.0"
MUSICBRAINZ_USER_AGENT = "moozhak/2.0.0 (https://github.com/moozhak/moozhak)"

# Discogs search filters, tracklist sources and tracklist renderings
SEARCH_TYPES = ("artist", "release", "master", "label")
TRACKS_TYPES = ("master", "release")
OUTPUT_FORMATS = ("human", "csv", "pipe", "markdown")
