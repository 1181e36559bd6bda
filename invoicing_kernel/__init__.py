"""
Invoicing Kernel

Shared foundation for the warehouse invoicing calculators:
- Structured JSON logging with request-scoped context
- Typed, code-carrying exceptions
- Decimal money helpers with explicit rounding points
- Reference data (products, ledgers) persistence and read-only selectors
"""

__version__ = "0.1.0"
