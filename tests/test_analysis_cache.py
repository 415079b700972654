from logical_brain.config import settings
from logical_brain.models.logical_analysis import LogicalAnalysisRecord
from logical_brain.services.analysis_cache import get_or_create_fact_base


def test_write_once_cache(db_session, catalog, make_document):
    documents = [make_document([{"name": "Ferritina", "value": "40"}], document_id="doc-1")]

    first, first_cached = get_or_create_fact_base(db_session, "user-1", documents, catalog, ["doc-1"])
    second, second_cached = get_or_create_fact_base(db_session, "user-1", documents, catalog, ["doc-1"])

    assert (first_cached, second_cached) == (False, True)
    assert second == first
    assert db_session.query(LogicalAnalysisRecord).count() == 1


def test_changed_document_set_creates_new_entry(db_session, catalog, make_document):
    original = [make_document([{"name": "Ferritina", "value": "40"}], document_id="doc-1")]
    changed = [make_document([{"name": "Ferritina", "value": "90"}], document_id="doc-1")]

    first, _ = get_or_create_fact_base(db_session, "user-1", original, catalog)
    second, cached = get_or_create_fact_base(db_session, "user-1", changed, catalog)

    assert not cached
    assert first.document_set_key != second.document_set_key
    assert db_session.query(LogicalAnalysisRecord).count() == 2
    assert first.analysis.biomarkers[0].tier == "suboptimal"


def test_entries_are_scoped_per_user(db_session, catalog, make_document):
    documents = [make_document([{"name": "Ferritina", "value": "40"}])]

    get_or_create_fact_base(db_session, "user-1", documents, catalog)
    _, cached = get_or_create_fact_base(db_session, "user-2", documents, catalog)

    assert not cached


def test_cache_can_be_disabled(db_session, catalog, make_document, monkeypatch):
    monkeypatch.setattr(settings, "analysis_cache_enabled", False)
    documents = [make_document([{"name": "Ferritina", "value": "40"}])]

    _, cached = get_or_create_fact_base(db_session, "user-1", documents, catalog)

    assert not cached
    assert db_session.query(LogicalAnalysisRecord).count() == 0
