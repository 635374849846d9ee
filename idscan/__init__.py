"""Identity Document Scanner.

Turns a photographed identity document into a structured record by
chaining remote and local OCR providers, OpenCV preprocessing for the
local path, rule-based document classification, and per-document-type
field extraction.
"""
