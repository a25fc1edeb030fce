"""Domain models used in business logic."""
import math
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class Role(StrEnum):
    """Roles allowed to work with client records."""
    SALES = "sales"
    ADMIN = "admin"


class Principal(BaseModel):
    """Authenticated caller resolved from a bearer token. Never persisted."""
    id: str = Field(..., min_length=1, description="Canonical string form of the user ID")
    email: str
    role: Role

    model_config = {"frozen": True}


def generate_client_id() -> str:
    """Client IDs use the main backend's format: 'C' followed by 8 hex characters."""
    return f"C{uuid.uuid4().hex[:8]}"


REQUIRED_CLIENT_FIELDS: tuple[str, ...] = (
    "customer_type",
    "product",
    "insurance_provider",
    "client_name",
    "mobile_no",
)

# Upload fields whose stored URL is written back into the field of the same name
PROOF_DOCUMENT_FIELDS: tuple[str, ...] = (
    "nic_proof",
    "dob_proof",
    "business_registration",
    "svat_proof",
    "vat_proof",
    "coverage_proof",
    "sum_insured_proof",
    "policy_fee_invoice",
    "vat_fee_debit_note",
    "payment_receipt_proof",
)

ATTACHMENT_DOCUMENT_FIELDS: tuple[str, ...] = (
    "policyholder_doc",
    "vehicle_number_doc",
    "proposal_form_doc",
    "quotation_doc",
    "cr_copy_doc",
    "schedule_doc",
    "invoice_debit_note_doc",
    "payment_receipt_doc",
    "nic_br_doc",
)

DOCUMENT_FIELDS: tuple[str, ...] = PROOF_DOCUMENT_FIELDS + ATTACHMENT_DOCUMENT_FIELDS


class ClientDetails(BaseModel):
    """Optional descriptive, document, policy and financial fields of a client."""

    introducer_code: str | None = None
    policy_: str | None = None
    branch: str | None = None
    street1: str | None = None
    street2: str | None = None
    city: str | None = None
    district: str | None = None
    province: str | None = None
    telephone: str | None = None
    contact_person: str | None = None
    email: str | None = None
    social_media: str | None = None

    # Document proofs (stored URLs)
    nic_proof: str | None = None
    dob_proof: str | None = None
    business_registration: str | None = None
    svat_proof: str | None = None
    vat_proof: str | None = None
    coverage_proof: str | None = None
    sum_insured_proof: str | None = None
    policy_fee_invoice: str | None = None
    vat_fee_debit_note: str | None = None
    payment_receipt_proof: str | None = None

    # Text-only fields
    ceilao_ib_file_no: str | None = None
    main_class: str | None = None
    insurer: str | None = None

    # Document + text pairs
    policyholder_doc: str | None = None
    policyholder_text: str | None = None
    vehicle_number_doc: str | None = None
    vehicle_number_text: str | None = None
    proposal_form_doc: str | None = None
    proposal_form_text: str | None = None
    quotation_doc: str | None = None
    quotation_text: str | None = None
    cr_copy_doc: str | None = None
    cr_copy_text: str | None = None
    schedule_doc: str | None = None
    schedule_text: str | None = None
    invoice_debit_note_doc: str | None = None
    invoice_debit_note_text: str | None = None
    payment_receipt_doc: str | None = None
    payment_receipt_text: str | None = None
    nic_br_doc: str | None = None
    nic_br_text: str | None = None

    # Policy details
    policy_type: str | None = None
    policy_no: str | None = None
    policy_period_from: date | None = None
    policy_period_to: date | None = None
    coverage: str | None = None
    sum_insured: float | None = None

    # Financial details
    basic_premium: float | None = None
    srcc_premium: float | None = None
    tc_premium: float | None = None
    net_premium: float | None = None
    stamp_duty: float | None = None
    admin_fees: float | None = None
    road_safety_fee: float | None = None
    policy_fee: float | None = None
    vat_fee: float | None = None
    total_invoice: float | None = None
    debit_note: str | None = None
    payment_receipt: str | None = None

    # Commission details
    commission_type: str | None = None
    commission_basic: float | None = None
    commission_srcc: float | None = None
    commission_tc: float | None = None

    policies: int | None = None

    model_config = {"from_attributes": True, "extra": "ignore"}


class ClientRecord(ClientDetails):
    """Domain model for an insurance client owned by a sales rep."""
    id: str = Field(default_factory=generate_client_id, max_length=20, description="Client ID, 'C' + 8 hex characters")
    customer_type: str = Field(..., min_length=1)
    product: str = Field(..., min_length=1)
    insurance_provider: str = Field(..., min_length=1)
    client_name: str = Field(..., min_length=1)
    mobile_no: str = Field(..., min_length=1)
    sales_rep_id: str = Field(..., min_length=1, description="ID of the owning sales rep")
    created_at: datetime = Field(default_factory=datetime.now, description="Creation timestamp")
    updated_at: datetime | None = None

    def attach_documents(self, document_urls: dict[str, str]) -> None:
        """Store uploaded document URLs in their matching fields."""
        for field_name, url in document_urls.items():
            if field_name in DOCUMENT_FIELDS:
                setattr(self, field_name, url)


CLIENT_FIELDS: tuple[str, ...] = tuple(ClientRecord.model_fields)


class ClientPage(BaseModel):
    """
    One page of a client listing.

    total counts every record matching the filter, so it is always >= len(records).
    """
    records: list[ClientRecord]
    total: int = Field(..., ge=0)
    page: int = Field(..., ge=1)
    page_size: int = Field(..., ge=1)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.page_size)

    @property
    def has_next_page(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev_page(self) -> bool:
        return self.page > 1


@dataclass(frozen=True)
class DocumentUpload:
    """A file received for one of the client's document fields."""
    field_name: str
    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


def parse_int_or_default(value: Any, default: int) -> int:
    """Parse a query value as an int, falling back to the default when absent or non-numeric."""
    if value is None:
        return default
    try:
        return int(str(value).strip())
    except ValueError:
        return default
