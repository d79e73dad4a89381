"""I/O: structured writers and codecs."""
