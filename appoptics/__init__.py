"""Client for the AppOptics metrics API with in-process measurement collection and reporting."""

__version__ = "0.1.0"