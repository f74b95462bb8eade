"""Service functions over the targeting tables."""
