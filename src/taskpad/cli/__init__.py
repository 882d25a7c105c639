"""Console command registry, bootstrap and entrypoint."""
