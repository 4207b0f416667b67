import io

import pytest

from propdesk.errors import ValidationError
from propdesk.models import Document
from propdesk.services.documents import (
    upload_document, toggle_visibility, delete_document, owner_documents,
    storage_directory, stored_filename, folder_display_name, document_type_display,
)
from propdesk.services.results import NO_FILE, STORE_FAILED, MISSING_AFTER_STORE
from propdesk.storage import FileSystemStorage, get_storage

from conftest import upload

TEN_MIB = 10 * 1024 * 1024


class BrokenStorage(FileSystemStorage):
    def save(self, content, filepath, content_type=None):
        raise IOError("disk full")


class LosingStorage(FileSystemStorage):
    """Claims to save but never writes anything"""

    def save(self, content, filepath, content_type=None):
        return filepath


def test_storage_directories(zone, building, unit):
    assert storage_directory(zone) == "riverside/general"
    assert storage_directory(zone, "company-accounts/2024") == "riverside/company-accounts/2024"
    assert storage_directory(building) == "riverside/buildings/tower-a-123-main-st"
    assert storage_directory(unit) == "riverside/buildings/tower-a-123-main-st/units/apt-1-tower-a-123-main-st"


def test_display_names():
    assert folder_display_name("general") == "General"
    assert folder_display_name("company-accounts/2024") == "Accounts 2024"
    assert folder_display_name("company-claims/2023") == "Claims 2023"
    assert document_type_display("profit_loss") == "Profit & Loss Statement"
    assert document_type_display("insurance_claim") == "Insurance Claim"


def test_unit_upload_round_trip(app, client, manager_headers, unit):
    content = b"%PDF-1.4\nlease agreement body\n"

    result = upload_document(unit, upload("Lease Agreement.pdf", content), {"visible_to_tenants": "yes"})

    assert result.ok
    assert result.message == 'Document "Lease Agreement.pdf" uploaded successfully!'
    document = result.entity
    assert document.path == "riverside/buildings/tower-a-123-main-st/units/apt-1-tower-a-123-main-st/Lease_Agreement.pdf"
    assert document.size == len(content)
    assert document.visible_to_tenants == "yes"
    assert document.documentable_type == "unit"

    url = result.data["document"]["url"]
    assert url.startswith("/media/")
    resp = client.get(url, headers=manager_headers)
    assert resp.status_code == 200
    assert resp.data == content

    resp = client.get(f"/api/documents/{document.id}/download", headers=manager_headers)
    assert resp.data == content
    assert "Lease Agreement.pdf" in resp.headers["Content-Disposition"]


@pytest.mark.parametrize("original, expected", [
    ("Lease Agreement.pdf", "Lease_Agreement.pdf"),
    ("契約書.pdf", "document.pdf"),
    ("契約書.PDF", "document.pdf"),
    ("../../etc/passwd.txt", "etc_passwd.txt"),
    ("見積もり", "document"),
])
def test_stored_filename(original, expected):
    assert stored_filename(original) == expected


def test_non_ascii_names_keep_their_extension(unit):
    first = upload_document(unit, upload("契約書.pdf")).entity
    second = upload_document(unit, upload("請求書.pdf")).entity

    assert first.path.endswith("/document.pdf")
    assert second.path.endswith("/document-1.pdf")
    assert first.name == "契約書.pdf"


def test_same_name_gets_suffix(building):
    first = upload_document(building, upload("plan.pdf", b"one")).entity
    second = upload_document(building, upload("plan.pdf", b"two")).entity

    assert first.path.endswith("/plan.pdf")
    assert second.path.endswith("/plan-1.pdf")
    storage = get_storage()
    with open(storage.get_path(first.path), "rb") as f:
        assert f.read() == b"one"


def test_oversized_file_rejected_before_storing(unit):
    with pytest.raises(ValidationError) as exc:
        upload_document(unit, upload("big.pdf", b"x" * (TEN_MIB + 1)))

    assert "file" in exc.value.errors
    assert Document.query.count() == 0
    assert not get_storage().exists(f"{storage_directory(unit)}/big.pdf")


def test_file_of_exactly_ten_mib_is_accepted(building):
    result = upload_document(building, upload("big.pdf", b"x" * TEN_MIB))
    assert result.ok


@pytest.mark.parametrize("owner_fixture, filename, allowed", [
    ("building", "photo.jpg", False),
    ("unit", "photo.jpg", True),
    ("unit", "sheet.xlsx", False),
    ("zone", "sheet.xlsx", True),
    ("zone", "photo.png", False),
    ("building", "script.exe", False),
    ("building", "NOTES.TXT", True),
])
def test_extension_rules(request, owner_fixture, filename, allowed):
    owner = request.getfixturevalue(owner_fixture)

    if allowed:
        assert upload_document(owner, upload(filename)).ok
    else:
        with pytest.raises(ValidationError):
            upload_document(owner, upload(filename))
        assert Document.query.count() == 0


def test_missing_file(unit):
    result = upload_document(unit, None)

    assert not result.ok
    assert result.kind == NO_FILE
    assert result.message == "No file was received. Please try again."
    assert result.status_code == 400


def test_storage_failure_leaves_no_row(app, unit):
    storage = BrokenStorage(app.config["UPLOAD_ROOT"])

    result = upload_document(unit, upload("lease.pdf"), storage=storage)

    assert not result.ok
    assert result.kind == STORE_FAILED
    assert result.message.startswith("Failed to upload document: File storage failed")
    assert result.status_code == 500
    assert Document.query.count() == 0


def test_file_missing_after_store_leaves_no_row(app, unit):
    storage = LosingStorage(app.config["UPLOAD_ROOT"])

    result = upload_document(unit, upload("lease.pdf"), storage=storage)

    assert result.kind == MISSING_AFTER_STORE
    assert result.message == "Failed to upload document: File was not saved to storage"
    assert Document.query.count() == 0


class TestZoneDocuments:
    def test_general_upload(self, zone):
        result = upload_document(zone, upload("minutes.pdf"), {"folder": "general", "year": "2024"})

        assert result.ok
        assert result.message == "Document uploaded successfully to General"
        document = result.entity
        assert document.folder_path == "general"
        assert document.year is None
        assert document.document_type is None
        assert document.path == "riverside/general/minutes.pdf"

    def test_accounts_upload(self, zone):
        result = upload_document(zone, upload("accounts.xlsx"), {
            "folder": "company_accounts", "year": "2024", "document_type": "balance_sheet",
        })

        assert result.ok
        assert result.message == "Document uploaded successfully to Accounts 2024"
        document = result.entity
        assert document.folder_path == "company-accounts/2024"
        assert document.year == 2024
        assert document.document_type == "balance_sheet"
        assert document.path == "riverside/company-accounts/2024/accounts.xlsx"

    def test_claims_need_year_and_matching_type(self, zone):
        with pytest.raises(ValidationError) as exc:
            upload_document(zone, upload("claim.pdf"), {
                "folder": "company_claims", "document_type": "tax_return",
            })

        assert set(exc.value.errors) == {"year", "document_type"}
        assert Document.query.count() == 0

    def test_folder_views(self, zone):
        upload_document(zone, upload("a.pdf"))
        upload_document(zone, upload("b.pdf"), {
            "folder": "company_accounts", "year": "2024", "document_type": "tax_return",
        })
        upload_document(zone, upload("c.pdf"), {
            "folder": "company_claims", "year": "2023", "document_type": "legal_claim",
        })

        assert owner_documents(zone).count() == 3
        assert [d.name for d in owner_documents(zone, "general")] == ["a.pdf"]
        assert [d.name for d in owner_documents(zone, "company-accounts")] == ["b.pdf"]
        assert [d.name for d in owner_documents(zone, "company-claims")] == ["c.pdf"]

    def test_zone_upload_endpoint(self, client, manager_headers, zone):
        resp = client.post(
            f"/api/zones/{zone.slug}/documents",
            headers=manager_headers,
            data={"file": (io.BytesIO(b"report"), "report.pdf"), "folder": "general"},
            content_type="multipart/form-data",
        )

        assert resp.status_code == 201
        assert resp.get_json()["document"]["folder_name"] == "General"

        resp = client.get(f"/api/zones/{zone.slug}/documents?folder=general", headers=manager_headers)
        assert [d["name"] for d in resp.get_json()["documents"]] == ["report.pdf"]


def test_upload_endpoint_without_file(client, manager_headers, unit):
    resp = client.post(
        f"/api/units/{unit.slug}/documents",
        headers=manager_headers,
        data={"visible_to_tenants": "yes"},
        content_type="multipart/form-data",
    )

    assert resp.status_code == 400
    assert resp.get_json()["error"] == "no_file"


def test_toggle_visibility(unit):
    document = upload_document(unit, upload("lease.pdf")).entity
    assert document.visible_to_tenants == "no"

    result = toggle_visibility(document)
    assert result.message == "Document is now visible to tenants."
    assert document.is_visible_to_tenants

    result = toggle_visibility(document)
    assert result.message == "Document is now hidden from tenants."
    assert not document.is_visible_to_tenants


def test_delete_document_removes_file(unit):
    document = upload_document(unit, upload("lease.pdf")).entity
    path = document.path

    result = delete_document(document)

    assert result.ok
    assert Document.query.count() == 0
    assert not get_storage().exists(path)
