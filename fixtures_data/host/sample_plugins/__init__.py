"""Plugins used by the bundling tests."""
