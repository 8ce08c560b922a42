"""Parse, rule loading and matching stages."""
