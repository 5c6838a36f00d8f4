"""linkqueue: outbound link triage for syndication feeds."""

__version__ = "0.1.0"
