"""Tests for docspine.store.documents."""

from dataclasses import dataclass, field

import pytest
from pydantic import BaseModel, Field

from docspine.store.documents import DocumentMetadata, WriteResult, from_document, to_document


class Visit(BaseModel):
    visit_key: str = Field(default="", exclude=True)
    user: str
    day: str


@dataclass
class Reading:
    sensor: str
    value: float
    tags: list[str] = field(default_factory=list)


class TestToDocument:
    def test_pydantic_respects_exclude(self):
        assert to_document(Visit(visit_key="k", user="u", day="d")) == {"user": "u", "day": "d"}

    def test_dataclass(self):
        assert to_document(Reading("t1", 1.5)) == {"sensor": "t1", "value": 1.5, "tags": []}

    def test_mapping_is_copied(self):
        source = {"a": 1}
        document = to_document(source)
        assert document == source
        assert document is not source

    def test_unsupported(self):
        with pytest.raises(TypeError, match="Cannot serialise"):
            to_document(42)


class TestFromDocument:
    def test_pydantic(self):
        assert from_document(Visit, {"user": "u", "day": "d"}) == Visit(user="u", day="d")

    def test_dataclass_ignores_unknown_keys(self):
        reading = from_document(Reading, {"sensor": "t1", "value": 2.0, "stored_at": 1})
        assert reading == Reading("t1", 2.0)


class TestResponseObjects:
    def test_metadata_from_hit(self):
        meta = DocumentMetadata.from_hit({"_id": "x", "_index": "test", "_routing": "g"})
        assert meta == DocumentMetadata(id="x", index="test", routing="g")

    def test_metadata_without_routing(self):
        assert DocumentMetadata.from_hit({"_id": "x", "_index": "test"}).routing is None

    def test_write_result(self):
        result = WriteResult.from_response(
            {"_index": "test", "_id": "a-b", "result": "created", "_version": 1, "_seq_no": 0, "_primary_term": 1}
        )
        assert result.result == "created"
        assert result.version == 1
        assert result.seq_no == 0
