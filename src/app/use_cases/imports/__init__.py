"""Tabular import use cases"""
from .normalize_tabular_file import TabularFileError, escape_cell, normalize_tabular_file
from .import_line_items import ImportLineItems, merge_import_rows
from .dtos import ImportOutcome, ImportedItemDTO, ImportLineItemsResponseDTO

__all__ = [
    "TabularFileError",
    "escape_cell",
    "normalize_tabular_file",
    "ImportLineItems",
    "merge_import_rows",
    "ImportOutcome",
    "ImportedItemDTO",
    "ImportLineItemsResponseDTO",
]
