import logging

import pytest

from logical_brain.exceptions import LogicalBrainError
from logical_brain.models.biomarker import BiomarkerReference
from logical_brain.models.protocol import ProtocolRecord
from logical_brain.schemas.catalog import BiomarkerDefinition, MetricDefinition, ProtocolDefinition
from logical_brain.seed.catalog_seed import BIOMARKERS, PROTOCOLS, protocol_id, seed_catalog_into
from logical_brain.services.catalog import build_catalog, load_catalog
from logical_brain.services.engine import analyze_values


def test_seed_is_idempotent(seeded_session):
    seed_catalog_into(seeded_session)

    assert seeded_session.query(BiomarkerReference).count() == len(BIOMARKERS)
    assert seeded_session.query(ProtocolRecord).count() == len(PROTOCOLS)


def test_loaded_catalog_parses_expressions_once(seeded_catalog):
    assert seeded_catalog.biomarker("tgo").aliases[:2] == ("TGO", "AST")
    assert seeded_catalog.biomarker("ferritina").lab_min == 15.0
    assert "ratio_tg_hdl" in seeded_catalog.formula_trees
    assert "tfg_estimada" in seeded_catalog.formula_errors
    assert not seeded_catalog.trigger_errors
    assert len(seeded_catalog.trigger_trees) == len(PROTOCOLS)


def test_catalog_is_read_only(seeded_catalog):
    with pytest.raises(TypeError):
        seeded_catalog.formula_trees["x"] = None


def test_duplicate_slug_is_rejected():
    with pytest.raises(LogicalBrainError) as exc_info:
        build_catalog(
            biomarkers=[BiomarkerDefinition(slug="hdl", name="HDL")],
            metrics=[MetricDefinition(slug="hdl", name="HDL ratio", formula="{hdl} / 2")],
        )
    assert exc_info.value.code == "CATALOG_ERROR"


def test_load_catalog_on_empty_database(db_session):
    catalog = load_catalog(db_session)
    assert catalog.biomarkers == ()
    assert catalog.protocols == ()


def test_slugs_are_case_insensitive():
    catalog = build_catalog(
        biomarkers=[BiomarkerDefinition(slug="TSH", name="TSH", lab_max=4.0)],
        protocols=[ProtocolDefinition(id="p-tireoide", trigger_condition="TSH > 4", type="Exame", title="Tireoide", description="Repetir TSH.")],
    )

    assert catalog.biomarker("TSH").slug == "tsh"
    assert not catalog.unresolved_references
    analysis = analyze_values(catalog, {"TSH": 6.0})
    assert [b.definition.slug for b in analysis.biomarkers] == ["tsh"]
    assert [p.definition.id for p in analysis.protocols] == ["p-tireoide"]


def test_unknown_slugs_in_expressions_are_reported(catalog, caplog):
    assert catalog.unresolved_references == {"p-base": ("hemoglobina",)}

    with caplog.at_level(logging.WARNING, logger="logical_brain.services.catalog"):
        build_catalog(
            biomarkers=[BiomarkerDefinition(slug="hdl", name="HDL")],
            metrics=[MetricDefinition(slug="ratio", name="Ratio", formula="{ldl} / {hdl}")],
        )
    assert "ratio references unknown slugs: ldl" in caplog.text


def test_seeded_catalog_reports_its_unknown_slug(seeded_catalog):
    key = protocol_id("Construção de Base Aeróbia")
    assert seeded_catalog.unresolved_references[key] == ("hemoglobina",)
