"""seedtrail test suite."""
