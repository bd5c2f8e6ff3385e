"""cperlib command-line interface."""
