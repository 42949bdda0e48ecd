"""Infrastructure helpers: logging and settings."""
