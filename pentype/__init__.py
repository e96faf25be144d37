"""Pen-type classification of songs from audio features and lyrics."""

__version__ = "0.1.0"
