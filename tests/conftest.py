from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from logical_brain.database import Base, get_db
from logical_brain.main import app
from logical_brain.schemas.catalog import BiomarkerDefinition, MetricDefinition, ProtocolDefinition
from logical_brain.seed.catalog_seed import seed_catalog_into
from logical_brain.services.catalog import build_catalog, load_catalog


@pytest.fixture()
def db_session() -> Generator:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    Base.metadata.create_all(bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def seeded_session(db_session):
    seed_catalog_into(db_session)
    return db_session


@pytest.fixture()
def seeded_catalog(seeded_session):
    return load_catalog(seeded_session)


@pytest.fixture()
def client(seeded_session) -> Generator[TestClient, None, None]:
    def override_get_db():
        try:
            yield seeded_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    # Tests use an in-memory DB via dependency override; skip app startup side effects.
    original_startup = list(app.router.on_startup)
    app.router.on_startup.clear()
    with TestClient(app) as test_client:
        yield test_client
    app.router.on_startup[:] = original_startup
    app.dependency_overrides.clear()


@pytest.fixture()
def catalog():
    """Small hand-built catalog, independent of the seed data."""
    return build_catalog(
        biomarkers=[
            BiomarkerDefinition(
                slug="insulina", name="Insulina em Jejum", unit="uUI/mL", optimal_max=8.0, lab_max=23.0,
                aliases=("Insulina",),
            ),
            BiomarkerDefinition(
                slug="triglicerideos", name="Triglicerídeos", unit="mg/dL", optimal_max=80.0, lab_max=150.0,
            ),
            BiomarkerDefinition(slug="hdl", name="HDL Colesterol", unit="mg/dL", optimal_min=60.0, aliases=("HDL",)),
            BiomarkerDefinition(
                slug="tgo", name="TGO (AST)", unit="U/L", optimal_max=18.0, lab_max=40.0, aliases=("TGO", "AST"),
            ),
            BiomarkerDefinition(
                slug="ferritina", name="Ferritina", unit="ng/mL", optimal_min=70.0, optimal_max=150.0, lab_min=15.0,
            ),
        ],
        metrics=[
            MetricDefinition(slug="ratio_tg_hdl", name="Relação TG/HDL", formula="{triglicerideos} / {hdl}", target_max=2.0),
            MetricDefinition(slug="tfg_estimada", name="TFG Estimada", formula="Variável (CKD-EPI)", target_min=90.0),
        ],
        protocols=[
            ProtocolDefinition(
                id="p-jantar", trigger_condition="insulina > 8 OR triglicerideos > 100", type="Dieta",
                title="Protocolo Jantar Limpo", description="Sem carboidratos após as 18h.",
            ),
            ProtocolDefinition(
                id="p-ferro", trigger_condition="ferritina < 70", type="Suplementação",
                title="Recuperação de Ferro", description="Ferro quelado + vitamina C.",
            ),
            ProtocolDefinition(
                id="p-base", trigger_condition="ferritina < 70 OR hemoglobina < 13", type="Treino",
                title="Construção de Base Aeróbia", description="Zona 2.",
            ),
        ],
    )


@pytest.fixture()
def make_document():
    def _make(parameters, document_type="lab_panel", document_id=None, exam_date=None):
        document = {"documentType": document_type, "modules": [{"moduleName": "Geral", "parameters": parameters}]}
        if document_id:
            document["documentId"] = document_id
        if exam_date:
            document["examDate"] = exam_date
        return document

    return _make
