"""Saved object export."""

from kibanagraph.export.exporter import Exporter, to_export_record

__all__ = ["Exporter", "to_export_record"]
