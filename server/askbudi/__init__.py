"""AskBudi API service: API keys, quota accounting and the library gateway."""
