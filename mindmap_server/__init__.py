"""Reference HTTP backend for the mind-map persistence boundary."""
