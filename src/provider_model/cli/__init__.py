"""Command line interface for inspecting provider sections."""
