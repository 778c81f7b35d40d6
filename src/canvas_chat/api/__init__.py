"""http api for canvas chat."""
