"""trackdesk: realtime partition sync and field-envelope core for the ticketing / asset app."""

__version__ = "1.0.0"
