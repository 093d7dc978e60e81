"""kibanagraph: dependency graph of Kibana saved objects."""

__version__ = "0.3.0"
