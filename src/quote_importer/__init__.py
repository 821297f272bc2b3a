"""
Quote Importer Package

Turns supplier and in-house quotation documents into structured quotation records:
- presets/: declarative workbook layouts and the layout detector
- extraction/spreadsheet/: cover, sections and line-item extraction from workbooks
- extraction/pdfextract/: positional PDF text, area lookup and best-effort line guessing
- mapping/: coordinate-mapping sessions for layouts no preset matches
- services/: import confirmation and the commit to the quotation store
"""

__version__ = "0.1.0"
