"""
InvoiceDesk - quote, invoice and job scheduling core
"""
__version__ = "0.1.0"
