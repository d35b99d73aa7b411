"""
Lab Risk Draft: helpers for drafting a lab risk-assessment table from a procedure.
"""

__version__ = "0.3.0"
