import logging
import re

import pytest

from src.client.schemas import CreateClientRequest
from src.sales.core.domain.models import DocumentUpload, Principal, Role
from src.sales.core.services.client_service import MAX_OFFSET
from src.shared.exceptions import ConflictingEntityFound, InvalidDocument, MissingRequiredFields
from tests.mocks import OTHER_SALES_REP_ID, SALES_REP_ID

CLIENT_ID_PATTERN = re.compile(r"^C[0-9a-f]{8}$")


@pytest.fixture
def principal():
    return Principal(id=SALES_REP_ID, email="rep@example.com", role=Role.SALES)


@pytest.fixture
def other_principal():
    return Principal(id=OTHER_SALES_REP_ID, email="other@example.com", role=Role.SALES)


def client_request(client_name: str = "Test Client", **overrides) -> CreateClientRequest:
    values = {
        "customer_type": "Individual",
        "product": "Motor Insurance",
        "insurance_provider": "Test Insurance Co",
        "client_name": client_name,
        "mobile_no": "0771234567",
    }
    values.update(overrides)
    return CreateClientRequest(**values)


async def create_clients(client_service, principal, count: int, prefix: str = "Client") -> list:
    return [
        await client_service.create_client(client_request(f"{prefix} {i:02d}"), principal)
        for i in range(count)
    ]


@pytest.mark.asyncio
async def test_create_client_successfully(client_service, client_repository, principal):
    # Arrange
    request = client_request(email="test.client@example.com", city="Colombo", sum_insured=1500000.5)

    # Act
    created = await client_service.create_client(request, principal)

    # Assert
    assert CLIENT_ID_PATTERN.match(created.id)
    assert created.client_name == "Test Client"
    assert created.sales_rep_id == SALES_REP_ID
    assert created.email == "test.client@example.com"
    assert created.sum_insured == 1500000.5
    assert created.created_at is not None
    # Verify it was actually saved to the database
    stored = await client_repository.get_by_id(created.id)
    assert stored is not None
    assert stored.city == "Colombo"


@pytest.mark.asyncio
async def test_create_client_owner_comes_from_principal(client_service, principal):
    request = CreateClientRequest.model_validate({
        "customer_type": "Corporate",
        "product": "Fire",
        "insurance_provider": "Provider A",
        "client_name": "Owner Check",
        "mobile_no": "0770000000",
        "sales_rep_id": "999",
        "unknownField": "ignored",
    })

    created = await client_service.create_client(request, principal)

    assert created.sales_rep_id == SALES_REP_ID


@pytest.mark.asyncio
async def test_create_client_keeps_supplied_id(client_service, principal):
    created = await client_service.create_client(client_request(id="Cabcdef12"), principal)
    assert created.id == "Cabcdef12"


@pytest.mark.asyncio
async def test_create_client_reports_all_missing_fields(client_service, principal):
    request = CreateClientRequest(customer_type="Individual", product="  ", client_name="Someone")

    with pytest.raises(MissingRequiredFields) as exc_info:
        await client_service.create_client(request, principal)

    assert exc_info.value.field_names == ["product", "insurance_provider", "mobile_no"]
    assert str(exc_info.value) == "Missing required fields: product, insurance_provider, mobile_no"


@pytest.mark.asyncio
async def test_create_client_raises_conflict_on_duplicate_name_and_provider(
    client_service, principal, other_principal
):
    await client_service.create_client(client_request(), principal)

    # Uniqueness is global, not per sales rep
    with pytest.raises(ConflictingEntityFound) as exc_info:
        await client_service.create_client(client_request(mobile_no="0779999999"), other_principal)

    assert str(exc_info.value) == "A client with this name and insurance provider already exists"


@pytest.mark.asyncio
async def test_same_name_with_other_provider_is_allowed(client_service, principal):
    await client_service.create_client(client_request(), principal)

    other = await client_service.create_client(
        client_request(insurance_provider="Another Insurance Co"), principal
    )

    assert other.insurance_provider == "Another Insurance Co"


@pytest.mark.asyncio
async def test_unique_constraint_catches_duplicates_missed_by_the_check(
    client_service, principal, monkeypatch
):
    await client_service.create_client(client_request(), principal)

    async def never_exists(client_name, insurance_provider):
        return False

    monkeypatch.setattr(client_service.repository, "exists_with_name_and_provider", never_exists)

    with pytest.raises(ConflictingEntityFound):
        await client_service.create_client(client_request(), principal)


@pytest.mark.asyncio
async def test_list_clients_paginates(client_service, principal):
    await create_clients(client_service, principal, 12)

    page = await client_service.list_clients(principal, page=2, page_size=5)

    assert len(page.records) == 5
    assert page.total == 12
    assert page.page == 2
    assert page.page_size == 5
    assert page.total_pages == 3
    assert page.has_next_page is True
    assert page.has_prev_page is True


@pytest.mark.asyncio
async def test_list_clients_pages_do_not_overlap(client_service, principal):
    created = await create_clients(client_service, principal, 7)

    seen = []
    for page_number in (1, 2, 3):
        page = await client_service.list_clients(principal, page=page_number, page_size=3)
        seen.extend(client.id for client in page.records)

    assert len(seen) == 7
    assert set(seen) == {client.id for client in created}
    # Newest first
    assert seen[0] == created[-1].id


@pytest.mark.asyncio
async def test_list_clients_only_returns_own_clients(client_service, principal, other_principal):
    await create_clients(client_service, principal, 2, prefix="Mine")
    await create_clients(client_service, other_principal, 3, prefix="Theirs")

    page = await client_service.list_clients(principal)

    assert page.total == 2
    assert all(client.sales_rep_id == SALES_REP_ID for client in page.records)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("page", "page_size", "expected_page", "expected_size"),
    [
        (None, None, 1, 10),
        ("abc", "xyz", 1, 10),
        (0, 0, 1, 10),
        (-3, -5, 1, 10),
        ("2", "1000", 2, 100),
    ],
)
async def test_list_clients_normalizes_paging_input(
    client_service, principal, page, page_size, expected_page, expected_size
):
    result = await client_service.list_clients(principal, page=page, page_size=page_size)

    assert result.page == expected_page
    assert result.page_size == expected_size


@pytest.mark.asyncio
async def test_list_clients_past_the_last_page_is_empty(client_service, principal):
    await create_clients(client_service, principal, 3)

    page = await client_service.list_clients(principal, page=5, page_size=10)

    assert page.records == []
    assert page.total == 3
    assert page.has_next_page is False


@pytest.mark.asyncio
async def test_list_clients_search_is_case_insensitive_across_columns(client_service, principal):
    await client_service.create_client(client_request("ACME Holdings"), principal)
    await client_service.create_client(client_request("Beta Traders", email="ops@acme.lk"), principal)
    await client_service.create_client(client_request("Gamma Ltd", policy_no="POL-ACME-1"), principal)
    await client_service.create_client(client_request("Delta Foods"), principal)

    page = await client_service.list_clients(principal, search="  acme ")

    assert page.total == 3
    assert {client.client_name for client in page.records} == {
        "ACME Holdings", "Beta Traders", "Gamma Ltd",
    }


@pytest.mark.asyncio
async def test_list_clients_search_treats_wildcards_literally(client_service, principal):
    await client_service.create_client(client_request("Fifty Percent"), principal)
    await client_service.create_client(client_request("100% Cover"), principal)

    page = await client_service.list_clients(principal, search="%")

    assert [client.client_name for client in page.records] == ["100% Cover"]


@pytest.mark.asyncio
async def test_blank_search_lists_everything(client_service, principal):
    await create_clients(client_service, principal, 2)

    page = await client_service.list_clients(principal, search="   ")

    assert page.total == 2


@pytest.mark.asyncio
async def test_recent_clients_newest_first(client_service, principal, other_principal):
    created = await create_clients(client_service, principal, 4)
    await create_clients(client_service, other_principal, 2, prefix="Theirs")

    recent = await client_service.recent_clients(principal, limit=2)

    assert [client.id for client in recent] == [created[3].id, created[2].id]


@pytest.mark.asyncio
async def test_recent_clients_default_limit(client_service, principal):
    await create_clients(client_service, principal, 12)

    assert len(await client_service.recent_clients(principal)) == 10
    assert len(await client_service.recent_clients(principal, limit="not-a-number")) == 10


@pytest.mark.asyncio
async def test_create_client_with_documents_stores_urls(client_service, blob_storage, principal):
    uploads = [
        DocumentUpload("nic_proof", "nic.pdf", "application/pdf", b"%PDF-1.4 nic"),
        DocumentUpload("quotation_doc", "quote.png", "image/png", b"\x89PNG quote"),
    ]

    created = await client_service.create_client_with_documents(client_request(), uploads, principal)

    assert created.nic_proof.startswith(f"https://files.test/clients/{created.id}/nic_proof/")
    assert created.nic_proof.endswith("-nic.pdf")
    assert created.quotation_doc.startswith(f"https://files.test/clients/{created.id}/quotation_doc/")
    assert created.dob_proof is None
    assert len(blob_storage.uploads) == 2


@pytest.mark.asyncio
async def test_failed_upload_is_skipped(client_service, blob_storage, principal):
    blob_storage.failing_fields.add("nic_proof")
    uploads = [
        DocumentUpload("nic_proof", "nic.pdf", "application/pdf", b"nic"),
        DocumentUpload("vat_proof", "vat.pdf", "application/pdf", b"vat"),
    ]

    created = await client_service.create_client_with_documents(client_request(), uploads, principal)

    assert created.nic_proof is None
    assert created.vat_proof is not None


@pytest.mark.asyncio
async def test_rejected_document_creates_nothing(client_service, client_repository, blob_storage, principal):
    uploads = [
        DocumentUpload("nic_proof", "nic.pdf", "application/pdf", b"nic"),
        DocumentUpload("vat_proof", "run.exe", "application/x-msdownload", b"MZ"),
    ]

    with pytest.raises(InvalidDocument):
        await client_service.create_client_with_documents(client_request(), uploads, principal)

    assert blob_storage.uploads == {}
    assert (await client_service.list_clients(principal)).total == 0


@pytest.mark.asyncio
async def test_duplicate_with_documents_uploads_nothing(client_service, blob_storage, principal):
    await client_service.create_client(client_request(), principal)
    uploads = [DocumentUpload("nic_proof", "nic.pdf", "application/pdf", b"nic")]

    with pytest.raises(ConflictingEntityFound):
        await client_service.create_client_with_documents(client_request(), uploads, principal)

    assert blob_storage.uploads == {}


@pytest.mark.asyncio
async def test_list_clients_caps_huge_page_numbers(client_service, principal):
    await create_clients(client_service, principal, 2)

    page = await client_service.list_clients(principal, page="99999999999999999999", page_size=10)

    assert page.records == []
    assert page.total == 2
    assert page.page == MAX_OFFSET // 10 + 1
    assert (page.page - 1) * page.page_size <= MAX_OFFSET


@pytest.mark.asyncio
async def test_conflict_after_upload_logs_stored_documents(
    client_service, blob_storage, principal, monkeypatch, caplog
):
    await client_service.create_client(client_request(), principal)

    async def never_exists(client_name, insurance_provider):
        return False

    monkeypatch.setattr(client_service.repository, "exists_with_name_and_provider", never_exists)
    uploads = [DocumentUpload("nic_proof", "nic.pdf", "application/pdf", b"nic")]

    with caplog.at_level(logging.WARNING, logger="src.sales.core.services.client_service"):
        with pytest.raises(ConflictingEntityFound):
            await client_service.create_client_with_documents(client_request(), uploads, principal)

    (stored_key,) = blob_storage.uploads
    assert f"https://files.test/{stored_key}" in caplog.text
