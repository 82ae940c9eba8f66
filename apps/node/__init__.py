"""beacond - the default node entry point."""
