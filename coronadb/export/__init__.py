"""Exporters"""

from .csv_exporter import EXPORT_HEADERS, CsvExporter

__all__ = ["CsvExporter", "EXPORT_HEADERS"]
