"""Tests for Pydantic models."""

import pytest
from pydantic import ValidationError

from app.backend.models import (
    Bureau,
    CreditItem,
    CreditItemStatus,
    CreditItemType,
    ProcessRequest,
    ProcessResponse,
)


class TestCreditItem:
    """Tests for CreditItem model."""

    def test_valid_item_from_model_output(self):
        """Test building an item from the camelCase keys the model returns."""
        item = CreditItem.model_validate(
            {
                "creditor": "Acme Collections",
                "type": "COLLECTION",
                "amount": 5000,
                "openedDate": "2019-03-01",
                "reportedDate": "2023-01-15",
                "accountLast4": "1234",
                "bureaus": ["Experian", "TransUnion"],
                "isNegative": True,
                "notes": "Placed for collection",
            }
        )
        assert item.creditor == "Acme Collections"
        assert item.type == CreditItemType.COLLECTION
        assert item.amount == 5000
        assert item.opened_date == "2019-03-01"
        assert item.reported_date == "2023-01-15"
        assert item.account_last4 == "1234"
        assert item.bureaus == [Bureau.EXPERIAN, Bureau.TRANSUNION]
        assert item.is_negative is True
        assert item.status == CreditItemStatus.TO_SEND

    def test_defaults(self):
        """Test defaults for optional fields."""
        item = CreditItem(creditor="Acme")
        assert item.type == CreditItemType.OTHER
        assert item.amount is None
        assert item.bureaus == []
        assert item.is_negative is False
        assert item.confidence == 0.8
        assert item.status == CreditItemStatus.TO_SEND

    def test_missing_creditor_rejected(self):
        """Test that a record without a creditor is invalid."""
        with pytest.raises(ValidationError):
            CreditItem.model_validate({"type": "COLLECTION", "amount": 100})

    def test_blank_creditor_rejected(self):
        """Test that a whitespace-only creditor is invalid."""
        with pytest.raises(ValidationError):
            CreditItem(creditor="   ")

    def test_unknown_type_becomes_other(self):
        """Test that unrecognized types map to OTHER."""
        assert CreditItem(creditor="A", type="BOAT_LOAN").type == CreditItemType.OTHER

    def test_type_spelling_normalized(self):
        """Test that type spellings are normalized."""
        assert CreditItem(creditor="A", type="charge-off").type == CreditItemType.CHARGE_OFF
        assert CreditItem(creditor="A", type="Late Payment").type == CreditItemType.LATE_PAYMENT

    def test_dollar_string_amount_converted_to_cents(self):
        """Test that a currency string is read as dollars."""
        assert CreditItem(creditor="A", amount="$1,250.00").amount == 125000

    def test_float_amount_rounded(self):
        """Test that float cents are rounded to int."""
        assert CreditItem(creditor="A", amount=4999.6).amount == 5000

    def test_unparseable_date_becomes_none(self):
        """Test that a garbage date is dropped rather than rejected."""
        item = CreditItem(creditor="A", opened_date="sometime")
        assert item.opened_date is None

    def test_bureau_names_normalized(self):
        """Test that bureau names are matched case-insensitively and deduplicated."""
        item = CreditItem(creditor="A", bureaus=["experian", "Trans Union", "Experian", "Innovis"])
        assert item.bureaus == [Bureau.EXPERIAN, Bureau.TRANSUNION]

    def test_null_is_negative_is_false(self):
        """Test that a null negative flag is treated as False."""
        assert CreditItem.model_validate({"creditor": "A", "isNegative": None}).is_negative is False

    def test_dedup_key(self):
        """Test the dedup key uses creditor, type and amount (0 when missing)."""
        assert CreditItem(creditor="Acme", type="COLLECTION", amount=5000).dedup_key == (
            "Acme",
            "COLLECTION",
            5000,
        )
        assert CreditItem(creditor="Acme").dedup_key == ("Acme", "OTHER", 0)


class TestProcessModels:
    """Tests for the /process request and response models."""

    def test_request_accepts_camel_case(self):
        """Test parsing the request body sent by the web app."""
        request = ProcessRequest.model_validate(
            {
                "jobId": "job-1",
                "profileId": "profile-1",
                "filePath": "profile-1/report.pdf",
                "fileName": "report.pdf",
            }
        )
        assert request.job_id == "job-1"
        assert request.profile_id == "profile-1"
        assert request.file_path == "profile-1/report.pdf"

    def test_request_requires_file_path(self):
        """Test that filePath is required."""
        with pytest.raises(ValidationError):
            ProcessRequest.model_validate({"jobId": "job-1", "profileId": "p"})

    def test_response_serializes_camel_case(self):
        """Test that the response uses camelCase keys."""
        response = ProcessResponse(job_id="job-1", total_items=3, negative_items=1)
        assert response.model_dump(by_alias=True) == {
            "success": True,
            "jobId": "job-1",
            "totalItems": 3,
            "negativeItems": 1,
        }
