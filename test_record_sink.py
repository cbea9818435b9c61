"""
Record Sink Tests

Sinks upsert by id within a model; re-saving identical content is a no-op.
"""

import asyncio

from storage.record_sink import InMemoryRecordSink, SqliteRecordSink, canonical_json


INVOICE = {"id": "1", "total": 100, "lines": [{"itemId": "9", "quantity": 2, "amount": 50}]}


def test_canonical_json_is_key_order_independent():
    assert canonical_json({"b": 1, "a": [2, {"d": 3, "c": 4}]}) == canonical_json({"a": [2, {"c": 4, "d": 3}], "b": 1})
    assert canonical_json({"a": 1}) == '{"a":1}'


class TestInMemorySink:

    def test_insert_update_unchanged(self):
        sink = InMemoryRecordSink()
        first = asyncio.run(sink.batch_save([INVOICE, {"id": "2", "total": 0}], "NetsuiteInvoice"))
        second = asyncio.run(sink.batch_save([INVOICE, {"id": "2", "total": 5}], "NetsuiteInvoice"))

        assert (first.inserted, first.updated, first.unchanged) == (2, 0, 0)
        assert (second.inserted, second.updated, second.unchanged) == (0, 1, 1)
        assert second.total == 2
        assert {r["id"]: r["total"] for r in sink.get_records("NetsuiteInvoice")} == {"1": 100, "2": 5}

    def test_empty_batch_recorded(self):
        sink = InMemoryRecordSink()
        result = asyncio.run(sink.batch_save([], "NetsuitePayment"))
        assert result.total == 0
        assert sink.batches == [("NetsuitePayment", [])]

    def test_models_are_separate(self):
        sink = InMemoryRecordSink()
        asyncio.run(sink.batch_save([{"id": "1"}], "NetsuiteInvoice"))
        asyncio.run(sink.batch_save([{"id": "1", "amount": 3}], "NetsuitePayment"))
        assert sink.get_records("NetsuiteInvoice") == [{"id": "1"}]
        assert sink.get_records("NetsuitePayment") == [{"id": "1", "amount": 3}]


class TestSqliteSink:

    def test_upsert_by_id(self, tmp_path):
        sink = SqliteRecordSink("conn-1", tmp_path / "records.db")
        asyncio.run(sink.batch_save([INVOICE], "NetsuiteInvoice"))
        changed = dict(INVOICE, total=120)
        result = asyncio.run(sink.batch_save([changed], "NetsuiteInvoice"))

        assert result.updated == 1
        assert sink.get_records("NetsuiteInvoice") == [changed]

    def test_unchanged_record_untouched(self, tmp_path):
        sink = SqliteRecordSink("conn-1", tmp_path / "records.db")
        asyncio.run(sink.batch_save([INVOICE], "NetsuiteInvoice"))
        row_before = sink.get_row("NetsuiteInvoice", "1")

        reordered = {"lines": INVOICE["lines"], "total": 100, "id": "1"}
        result = asyncio.run(sink.batch_save([reordered], "NetsuiteInvoice"))

        assert result.unchanged == 1
        assert sink.get_row("NetsuiteInvoice", "1") == row_before

    def test_connections_are_isolated(self, tmp_path):
        db_path = tmp_path / "records.db"
        sink_a = SqliteRecordSink("conn-a", db_path)
        sink_b = SqliteRecordSink("conn-b", db_path)
        asyncio.run(sink_a.batch_save([INVOICE], "NetsuiteInvoice"))

        assert sink_b.get_records("NetsuiteInvoice") == []
        assert sink_b.get_row("NetsuiteInvoice", "1") is None
        assert asyncio.run(sink_b.batch_save([INVOICE], "NetsuiteInvoice")).inserted == 1

    def test_empty_batch(self, tmp_path):
        sink = SqliteRecordSink("conn-1", tmp_path / "records.db")
        assert asyncio.run(sink.batch_save([], "NetsuiteInvoice")).total == 0
