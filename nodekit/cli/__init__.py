"""Command tree for nodekit nodes."""
