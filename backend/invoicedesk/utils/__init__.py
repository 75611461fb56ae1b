"""
Shared helpers: money arithmetic/formatting, VAT rates, identifiers
"""
