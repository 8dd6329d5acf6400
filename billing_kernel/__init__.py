"""
Billing Kernel

Domain values, records and typed errors for a services company's billing
back office:
- Decimal-only amounts with a fixed numeric ceiling
- Lenient record parsing that degrades malformed rows to zero values
- Structured JSON logging
- SQL persistence models
"""

__version__ = "0.1.0"
