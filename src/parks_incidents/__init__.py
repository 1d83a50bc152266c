"""Parks Incident Desk: report park incidents and track them through their lifecycle."""

__version__ = "0.1.0"
