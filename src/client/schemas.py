"""API schemas for client requests, responses and response envelopes."""
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, EmailStr, Field, field_validator


class ClientFields(BaseModel):
    """Optional fields shared by client requests and responses."""
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
    social_media: str | None = None

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

    ceilao_ib_file_no: str | None = None
    main_class: str | None = None
    insurer: str | None = None

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

    policy_type: str | None = None
    policy_no: str | None = None
    policy_period_from: date | None = None
    policy_period_to: date | None = None
    coverage: str | None = None
    sum_insured: float | None = None

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

    commission_type: str | None = None
    commission_basic: float | None = None
    commission_srcc: float | None = None
    commission_tc: float | None = None

    policies: int | None = None


class CreateClientRequest(ClientFields):
    """
    Request schema for creating a new client.

    Required fields are declared optional here so that missing values are reported
    together by the service. Keys that are not client fields (including any owner ID)
    are ignored.
    """
    id: str | None = Field(default=None, max_length=20, description="Client ID, generated when omitted")
    customer_type: str | None = None
    product: str | None = None
    insurance_provider: str | None = None
    client_name: str | None = None
    mobile_no: str | None = None
    email: EmailStr | None = None

    model_config = {"extra": "ignore"}

    @field_validator("*", mode="before")
    @classmethod
    def blank_to_none(cls, v: Any) -> Any:
        """Treat blank strings as missing values."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class ClientResponse(ClientFields):
    """Response schema for client data returned by the API."""
    id: str
    customer_type: str
    product: str
    insurance_provider: str
    client_name: str
    mobile_no: str
    email: str | None = None
    sales_rep_id: str
    created_at: datetime
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class PaginationResponse(BaseModel):
    """Pagination metadata of a client listing."""
    page: int
    pageSize: int
    total: int
    totalPages: int
    hasNextPage: bool
    hasPrevPage: bool


class ClientEnvelope(BaseModel):
    """Envelope for a single created client."""
    success: bool = True
    message: str | None = None
    data: ClientResponse


class ClientListEnvelope(BaseModel):
    """Envelope for a page of clients."""
    success: bool = True
    data: list[ClientResponse]
    pagination: PaginationResponse


class RecentClientsEnvelope(BaseModel):
    """Envelope for the most recent clients."""
    success: bool = True
    count: int
    data: list[ClientResponse]


class ErrorResponse(BaseModel):
    """Envelope for every error response."""
    success: bool = False
    message: str


class HealthResponse(BaseModel):
    """Liveness probe response."""
    status: str
    service: str
    timestamp: datetime
    environment: str
