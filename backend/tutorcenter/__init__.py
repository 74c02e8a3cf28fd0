"""Tutoring-center operations backend: recurring session generation engine."""
