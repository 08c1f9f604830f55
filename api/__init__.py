"""CiteCheck HTTP service."""
