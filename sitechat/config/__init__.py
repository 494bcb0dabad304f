"""Settings and prompt templates."""
