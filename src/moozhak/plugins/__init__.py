"""Service clients for the third-party music APIs used by moozhak."""
