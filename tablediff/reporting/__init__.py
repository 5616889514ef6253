"""Report export."""

from .exporter import ReportExporter, ExportArtifact, flatten_entry

__all__ = ["ReportExporter", "ExportArtifact", "flatten_entry"]
