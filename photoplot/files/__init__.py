"""YAML document files."""

from photoplot.files.document_file import document_from_dict, document_to_dict, load_document, save_document

__all__ = ["document_from_dict", "document_to_dict", "load_document", "save_document"]
