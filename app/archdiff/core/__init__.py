"""Core building blocks: paths, configuration and content hashing."""
