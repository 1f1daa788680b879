"""EVA API response layer: envelopes, metadata, view variants and events."""

__version__ = "2.0.0"
