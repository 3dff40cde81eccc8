"""service-rules - rule-based classification of discovered service instances."""

__version__ = "0.1.0"
