"""kibanagraph command-line interface.

Exposes:
    cli -- Click group entry point (registered as ``kibanagraph`` script).
"""

from kibanagraph.cli.main import cli

__all__ = ["cli"]
