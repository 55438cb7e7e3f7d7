"""mentortrack: weekly performance-tracking engine for mentor dashboards."""

__version__ = "1.0.0"
