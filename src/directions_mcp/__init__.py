"""Walk and bus itinerary planning over a fixed transit network."""

__version__ = "0.1.0"
