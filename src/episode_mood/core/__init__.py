"""Episode mood core logic."""
