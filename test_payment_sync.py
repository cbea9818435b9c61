"""
Customer Payment Sync Tests

applyTo is built from the apply entries' self links; entries whose link
does not name a document are dropped.
"""

import asyncio

import pytest

from core.models.canonical import PAYMENT_MODEL_NAME
from storage.record_sink import InMemoryRecordSink
from syncs import SyncConfig, SyncContext, get_sync, list_available_syncs
from syncs.payments import sync_payments

from fakes import RoutedFetcher

BASE = "https://123.suitetalk.api.netsuite.com/services/rest/record/v1"


def refs(*ids, **fields):
    return {"items": [{"id": i, "links": []} for i in ids], **fields}


def apply_entry(href):
    return {"links": [{"rel": "self", "href": href}]}


def run(routes, **config):
    sink = InMemoryRecordSink()
    ctx = SyncContext(RoutedFetcher(routes), sink, SyncConfig(**config), connection_id="conn-1")
    summary = asyncio.run(sync_payments(ctx))
    return sink, summary


class TestPaymentSync:

    def test_full_payment_record(self):
        routes = {
            "/customerpayment?offset=0": refs("7", hasMore=False),
            "/customerpayment/7": {
                "id": "7",
                "tranId": "PYMT-7",
                "tranDate": "2024-03-05",
                "customer": {"id": "77", "refName": "Acme"},
                "payment": "150.00",
                "currency": {"id": "1", "refName": "USD"},
                "status": {"id": "Deposited"},
            },
            "/customerpayment/7/apply": {
                "items": [
                    apply_entry(f"{BASE}/customerpayment/7/apply/doc=981"),
                    apply_entry(f"{BASE}/customerpayment/7/apply/doc=982"),
                ],
            },
        }
        sink, summary = run(routes)

        model_name, records = sink.batches[0]
        assert model_name == PAYMENT_MODEL_NAME
        assert records == [{
            "id": "7",
            "createdAt": "2024-03-05",
            "customerId": "77",
            "amount": 150,
            "currency": "USD",
            "paymentReference": "PYMT-7",
            "status": "Deposited",
            "applyTo": ["981", "982"],
        }]
        assert summary.saved == 1

    def test_non_matching_apply_entry_dropped(self):
        routes = {
            "/customerpayment?offset=0": refs("7", hasMore=False),
            "/customerpayment/7": {"id": "7"},
            "/customerpayment/7/apply": {
                "items": [
                    apply_entry(f"{BASE}/customerpayment/7/apply/line=1"),
                    apply_entry(f"{BASE}/customerpayment/7/apply/doc=981"),
                ],
            },
        }
        sink, _ = run(routes)
        assert sink.batches[0][1][0]["applyTo"] == ["981"]

    def test_missing_apply_collection(self):
        routes = {
            "/customerpayment?offset=0": refs("7", hasMore=False),
            "/customerpayment/7": {"id": "7", "memo": "Cheque"},
        }
        sink, _ = run(routes)
        record = sink.batches[0][1][0]
        assert record["applyTo"] == []
        assert record["description"] == "Cheque"

    def test_missing_payment_skipped(self):
        routes = {
            "/customerpayment?offset=0": refs("6", "7", hasMore=False),
            "/customerpayment/7": {"id": "7"},
        }
        sink, summary = run(routes)
        assert [r["id"] for r in sink.batches[0][1]] == ["7"]
        assert summary.skipped == 1

    def test_empty_list_gives_empty_batch(self):
        sink, _ = run({"/customerpayment?offset=0": refs(hasMore=False)})
        assert sink.batches == [(PAYMENT_MODEL_NAME, [])]

    def test_missing_list_endpoint_gives_empty_batch(self):
        sink, summary = run({})
        assert sink.batches == [(PAYMENT_MODEL_NAME, [])]
        assert summary.listed == 0

    def test_reference_without_id_skipped(self):
        routes = {
            "/customerpayment?offset=0": {"items": [{"id": None}, {"id": "7"}], "hasMore": False},
            "/customerpayment/7": {"id": "7"},
        }
        sink, summary = run(routes)
        assert [r["id"] for r in sink.batches[0][1]] == ["7"]
        assert summary.skipped == 1


def test_sync_registry():
    assert get_sync("payments") is sync_payments
    assert set(list_available_syncs()) >= {"invoices", "payments"}


def test_unknown_sync_raises():
    with pytest.raises(ValueError, match="Unknown sync"):
        get_sync("journal_entries")
