"""Business logic services for Docuform."""

# Service modules are imported individually where needed
# to avoid circular imports

__all__ = [
    "document_number",
    "customer",
    "end_customer",
    "end_customer_sync",
    "contractor",
    "usage",
    "errors",
]
