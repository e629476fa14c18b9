"""
Extraction of delimited files from generated text, and writing them to disk.
"""

from .extract import ArtifactSet, extract_files, format_files, files_to_yaml
from .write import write_files

__all__ = ["ArtifactSet", "extract_files", "format_files", "files_to_yaml", "write_files"]
