"""
Tests for directory lookups and out-of-band seeding
"""
from aadhaar_auth.models import DirectoryEntry
from aadhaar_auth.services.directory_service import DirectoryService


def test_find_by_account_id(db, directory_entry):
    found = DirectoryService.find_by_account_id(db, "735269466602")
    assert found.phone == "+918085745154"
    assert DirectoryService.find_by_account_id(db, "111111111111") is None


def test_exists_account(db, directory_entry):
    assert DirectoryService.exists_account(db, "735269466602") is True
    assert DirectoryService.exists_account(db, "111111111111") is False


def test_upsert_entries(db, directory_entry):
    rows = [
        {"aadhaar": "111111111111", "phone": "9876543210", "fullname": "Asha Devi"},
        {"aadhaar": "735269466602", "phone": "918085745155"},
        {"aadhaar": "12345", "phone": "9876543210"},
        {"aadhaar": "222222222222", "phone": "12"},
        {"aadhaar": "333333333333", "phone": "9876543211"},
        {"aadhaar": "333333333333", "phone": "9876543212"},
    ]

    added, updated, skipped = DirectoryService.upsert_entries(db, rows)

    assert (added, updated, skipped) == (2, 2, 2)
    asha = DirectoryService.find_by_account_id(db, "111111111111")
    assert asha.phone == "+919876543210"
    assert asha.full_name == "Asha Devi"

    db.refresh(directory_entry)
    assert directory_entry.phone == "+918085745155"
    # Name is kept when the row does not carry one
    assert directory_entry.full_name == "Ravi Kumar"

    assert DirectoryService.find_by_account_id(db, "333333333333").phone == "+919876543212"
    assert db.query(DirectoryEntry).count() == 3
