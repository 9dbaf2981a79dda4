"""
Question Import Engine
======================
Converts uploaded exam documents (PDF, DOCX/DOC, XLSX/XLS, CSV, TXT) into
normalized, de-duplicated multiple-choice question records.

Architecture:
    - Format Dispatcher: Picks a text or tabular extractor by file extension
    - Block Segmenter: Splits free text into candidate question blocks
    - Field Extractors: Recover stem, options, answers and explanation
    - Tabular Row Parser: Maps spreadsheet columns to question fields
    - Deduplicator: Drops exact and near-duplicate questions
    - Engine: Runs the pipeline with per-item error capture

Version: 1.0.0
"""

__version__ = "1.0.0"
