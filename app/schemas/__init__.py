"""Pydantic schemas for Docuform API."""

from app.schemas.contractor import (
    ContractorCreate,
    ContractorResponse,
    ContractorUpdate,
)
from app.schemas.customer import (
    CustomerCreate,
    CustomerResponse,
    CustomerUpdate,
    EndCustomerProject,
)
from app.schemas.document_number import (
    DocumentNumberRequest,
    DocumentNumberResponse,
    UsageResponse,
)
from app.schemas.end_customer import (
    EndCustomerCreate,
    EndCustomerResponse,
    EndCustomerSyncResponse,
    EndCustomerUpdate,
)

__all__ = [
    # Customer
    "CustomerCreate",
    "CustomerUpdate",
    "CustomerResponse",
    "EndCustomerProject",
    # EndCustomer
    "EndCustomerCreate",
    "EndCustomerUpdate",
    "EndCustomerResponse",
    "EndCustomerSyncResponse",
    # Contractor
    "ContractorCreate",
    "ContractorUpdate",
    "ContractorResponse",
    # Document numbers
    "DocumentNumberRequest",
    "DocumentNumberResponse",
    "UsageResponse",
]
