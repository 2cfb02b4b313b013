"""
Hexkeeper - a campaign tracker for tabletop hex-crawl play.

Tracks terrain travel time, the in-game calendar, weather and the daily
foraging/hunting/navigation checks of a single travelling party.
"""

__version__ = "0.1.0"
