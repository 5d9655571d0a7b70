"""Clippy — conversational backend with a tool-augmented reply loop."""
