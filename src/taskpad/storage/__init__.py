"""Local key-value storage and snapshot persistence."""
