"""Scraper for New Hampshire residential energy-supplier plans."""

__version__ = "0.1.0"
