"""LoanChain Extraction Package.

Offline-first extraction of syndicated loan agreement terms from PDF documents.
Uses local pattern matching by default and a remote language model on request.
"""

__version__ = "1.0.0"
