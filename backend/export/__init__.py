from .csv import (
    CSV_MEDIA_TYPE,
    CsvArtifact,
    ExportRecord,
    csv_data_uri,
    export_selected_csv,
    serialize_csv,
    to_records,
)

__all__ = [
    "CSV_MEDIA_TYPE",
    "CsvArtifact",
    "ExportRecord",
    "csv_data_uri",
    "export_selected_csv",
    "serialize_csv",
    "to_records",
]
