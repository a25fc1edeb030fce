from datetime import date, datetime
from sqlalchemy import String, Text, Date, DateTime, Integer, Numeric, Index, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.database.database import Base

Money = Numeric(18, 2, asdecimal=False)


class ClientEntity(Base):
    """SQLAlchemy model for the clients table."""
    __tablename__ = "clients"
    __table_args__ = (
        # A client name may appear only once per insurance provider
        UniqueConstraint("client_name", "insurance_provider", name="uq_clients_name_provider"),
    )

    id: Mapped[str] = mapped_column(String(20), primary_key=True)
    introducer_code: Mapped[str | None] = mapped_column(String(100))
    customer_type: Mapped[str] = mapped_column(String(100), nullable=False)
    product: Mapped[str] = mapped_column(String(255), nullable=False)
    policy_: Mapped[str | None] = mapped_column(String(255))
    insurance_provider: Mapped[str] = mapped_column(String(255), nullable=False)
    branch: Mapped[str | None] = mapped_column(String(255))
    client_name: Mapped[str] = mapped_column(String(255), nullable=False)
    street1: Mapped[str | None] = mapped_column(String(255))
    street2: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(100))
    district: Mapped[str | None] = mapped_column(String(100))
    province: Mapped[str | None] = mapped_column(String(100))
    telephone: Mapped[str | None] = mapped_column(String(50))
    mobile_no: Mapped[str] = mapped_column(String(50), nullable=False)
    contact_person: Mapped[str | None] = mapped_column(String(255))
    email: Mapped[str | None] = mapped_column(String(255))
    social_media: Mapped[str | None] = mapped_column(String(255))

    # Document proofs
    nic_proof: Mapped[str | None] = mapped_column(Text)
    dob_proof: Mapped[str | None] = mapped_column(Text)
    business_registration: Mapped[str | None] = mapped_column(Text)
    svat_proof: Mapped[str | None] = mapped_column(Text)
    vat_proof: Mapped[str | None] = mapped_column(Text)
    coverage_proof: Mapped[str | None] = mapped_column(Text)
    sum_insured_proof: Mapped[str | None] = mapped_column(Text)
    policy_fee_invoice: Mapped[str | None] = mapped_column(Text)
    vat_fee_debit_note: Mapped[str | None] = mapped_column(Text)
    payment_receipt_proof: Mapped[str | None] = mapped_column(Text)

    # Text-only fields
    ceilao_ib_file_no: Mapped[str | None] = mapped_column(String(100))
    main_class: Mapped[str | None] = mapped_column(String(100))
    insurer: Mapped[str | None] = mapped_column(String(255))

    # Document + text pairs
    policyholder_doc: Mapped[str | None] = mapped_column(Text)
    policyholder_text: Mapped[str | None] = mapped_column(Text)
    vehicle_number_doc: Mapped[str | None] = mapped_column(Text)
    vehicle_number_text: Mapped[str | None] = mapped_column(Text)
    proposal_form_doc: Mapped[str | None] = mapped_column(Text)
    proposal_form_text: Mapped[str | None] = mapped_column(Text)
    quotation_doc: Mapped[str | None] = mapped_column(Text)
    quotation_text: Mapped[str | None] = mapped_column(Text)
    cr_copy_doc: Mapped[str | None] = mapped_column(Text)
    cr_copy_text: Mapped[str | None] = mapped_column(Text)
    schedule_doc: Mapped[str | None] = mapped_column(Text)
    schedule_text: Mapped[str | None] = mapped_column(Text)
    invoice_debit_note_doc: Mapped[str | None] = mapped_column(Text)
    invoice_debit_note_text: Mapped[str | None] = mapped_column(Text)
    payment_receipt_doc: Mapped[str | None] = mapped_column(Text)
    payment_receipt_text: Mapped[str | None] = mapped_column(Text)
    nic_br_doc: Mapped[str | None] = mapped_column(Text)
    nic_br_text: Mapped[str | None] = mapped_column(Text)

    # Policy details
    policy_type: Mapped[str | None] = mapped_column(String(100))
    policy_no: Mapped[str | None] = mapped_column(String(100))
    policy_period_from: Mapped[date | None] = mapped_column(Date)
    policy_period_to: Mapped[date | None] = mapped_column(Date)
    coverage: Mapped[str | None] = mapped_column(Text)
    sum_insured: Mapped[float | None] = mapped_column(Money)

    # Financial details
    basic_premium: Mapped[float | None] = mapped_column(Money)
    srcc_premium: Mapped[float | None] = mapped_column(Money)
    tc_premium: Mapped[float | None] = mapped_column(Money)
    net_premium: Mapped[float | None] = mapped_column(Money)
    stamp_duty: Mapped[float | None] = mapped_column(Money)
    admin_fees: Mapped[float | None] = mapped_column(Money)
    road_safety_fee: Mapped[float | None] = mapped_column(Money)
    policy_fee: Mapped[float | None] = mapped_column(Money)
    vat_fee: Mapped[float | None] = mapped_column(Money)
    total_invoice: Mapped[float | None] = mapped_column(Money)
    debit_note: Mapped[str | None] = mapped_column(String(255))
    payment_receipt: Mapped[str | None] = mapped_column(String(255))

    # Commission details
    commission_type: Mapped[str | None] = mapped_column(String(100))
    commission_basic: Mapped[float | None] = mapped_column(Money)
    commission_srcc: Mapped[float | None] = mapped_column(Money)
    commission_tc: Mapped[float | None] = mapped_column(Money)

    sales_rep_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    policies: Mapped[int | None] = mapped_column(Integer)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )
    updated_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True
    )


# Listings always filter by owner and sort newest first
Index(
    'ix_clients_sales_rep_created_at',
    ClientEntity.sales_rep_id,
    ClientEntity.created_at.desc(),
)
