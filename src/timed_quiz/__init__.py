"""Timed multiple-choice quiz for the terminal."""
