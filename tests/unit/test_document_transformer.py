"""
Tests de la transformacion registro origen -> documentos del indice.
"""
from sync_service.application.services.document_transformer import (
    normalize_keywords,
    transform_record,
    transform_records,
)
from sync_service.domain.entities.source_record import SourceRecord, SourceTranslation
from tests.fakes import at


def _record(video_id=1, updated=100, translations=()):
    return SourceRecord(id=video_id, status="published", updated_at=at(updated), translations=tuple(translations))


class TestNormalizeKeywords:
    def test_none_is_empty_list(self):
        assert normalize_keywords(None) == []

    def test_comma_separated_string_is_split_and_trimmed(self):
        assert normalize_keywords(" cats, dogs ,, birds ") == ["cats", "dogs", "birds"]

    def test_list_drops_empty_items(self):
        assert normalize_keywords(["a", "", None, " b "]) == ["a", "b"]

    def test_scalar_is_wrapped(self):
        assert normalize_keywords(42) == ["42"]


class TestTransformRecord:
    def test_one_document_per_translation(self):
        """Un video con K traducciones produce K documentos."""
        record = _record(
            video_id=7,
            updated=1_700_000_000,
            translations=[
                SourceTranslation(id=11, languages_code="en", title="Hello", slug="hello", keywords=["x"]),
                SourceTranslation(id=12, languages_code="vi", title="Xin chao", slug="xin-chao"),
            ],
        )

        docs = transform_record(record)

        assert [d.id for d in docs] == ["11", "12"]
        assert all(d.video_id == "7" for d in docs)
        assert [d.lang for d in docs] == ["en", "vi"]
        assert all(d.updated_at == 1_700_000_000 for d in docs)
        assert docs[0].keywords == ["x"]
        assert docs[1].keywords == []

    def test_document_id_is_deterministic(self):
        record = _record(translations=[SourceTranslation(id=5, languages_code="en", title="t", slug="s")])

        assert transform_record(record)[0].id == transform_record(record)[0].id == "5"

    def test_record_without_translations_produces_nothing(self):
        assert transform_record(_record(translations=[])) == []

    def test_missing_title_is_indexed_as_empty_string(self):
        record = _record(translations=[SourceTranslation(id=3, languages_code="en", title=None, slug="s")])

        doc = transform_record(record)[0]

        assert doc.title == ""
        assert doc.slug == "s"

    def test_payload_shape(self):
        record = _record(
            updated=60,
            translations=[SourceTranslation(id=9, languages_code="en", title="T", slug="t", keywords="a,b")],
        )

        payload = transform_record(record)[0].to_payload()

        assert payload == {
            "id": "9",
            "video_id": "1",
            "lang": "en",
            "title": "T",
            "slug": "t",
            "keywords": ["a", "b"],
            "updated_at": 60,
        }


def test_transform_records_flattens_in_order():
    records = [
        _record(video_id=1, translations=[SourceTranslation(id=1, languages_code="en")]),
        _record(video_id=2, translations=[]),
        _record(
            video_id=3,
            translations=[
                SourceTranslation(id=4, languages_code="en"),
                SourceTranslation(id=5, languages_code="vi"),
            ],
        ),
    ]

    assert [d.id for d in transform_records(records)] == ["1", "4", "5"]
