# This project was developed with assistance from AI tools.
"""Loan document tracker API."""

__version__ = "0.1.0"
