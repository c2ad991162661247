"""
Form Core

Client-side validation and error normalization shared by every
record-editing form (moves, employees, vehicles, invoices).
"""

__version__ = "1.0.0"
