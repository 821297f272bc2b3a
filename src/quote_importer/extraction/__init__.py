"""Quotation extraction from workbooks and PDF documents."""


def process_workbook(data, preset_id=None):
    """Run the spreadsheet pipeline (lazy import)."""
    from quote_importer.extraction.pipeline import process_workbook as _process

    return _process(data, preset_id)


def process_pdf(data, tolerance=0.5):
    """Run the PDF text pipeline (lazy import)."""
    from quote_importer.extraction.pipeline import process_pdf as _process

    return _process(data, tolerance)
