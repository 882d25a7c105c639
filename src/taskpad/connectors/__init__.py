"""Console presentation layer and notification sinks."""
