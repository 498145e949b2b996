"""MLB media import service: fetches, normalizes and caches MLB.com video metadata."""
