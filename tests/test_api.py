def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_catalog_endpoints(client):
    biomarkers = client.get("/api/medical-knowledge/biomarkers").json()
    assert biomarkers[0]["slug"] == "insulina"
    assert any(b["slug"] == "tgo" and "AST" in b["aliases"] for b in biomarkers)

    metrics = client.get("/api/medical-knowledge/metrics").json()
    assert [m["slug"] for m in metrics] == ["ratio_tg_hdl", "ratio_t3l_t3r", "tfg_estimada"]

    protocols = client.get("/api/medical-knowledge/protocols").json()
    assert protocols[0]["title"] == "Protocolo Jantar Limpo"


def test_biomarker_by_slug_and_category_filter(client):
    response = client.get("/api/medical-knowledge/biomarkers/ferritina")
    assert response.status_code == 200
    assert response.json()["lab_min"] == 15.0

    tireoide = client.get("/api/medical-knowledge/biomarkers", params={"category": "Tireoide"}).json()
    assert [b["slug"] for b in tireoide] == ["tsh", "t3_livre", "t3_reverso"]


def test_unknown_biomarker_uses_error_envelope(client):
    response = client.get("/api/medical-knowledge/biomarkers/unknown")
    assert response.status_code == 404
    payload = response.json()
    assert payload["statusCode"] == 404
    assert payload["error"] == "NotFound"


def test_evaluate_values(client):
    response = client.post(
        "/api/medical-knowledge/evaluate",
        json={
            "biomarkers": [
                {"slug": "triglicerideos", "value": 150},
                {"slug": "hdl", "value": 50},
                {"slug": "ferritina", "value": 50},
                {"slug": "hemoglobina", "value": 12},
            ]
        },
    )
    assert response.status_code == 200
    payload = response.json()

    assert [b["definition"]["slug"] for b in payload["biomarkers"]] == ["ferritina", "triglicerideos", "hdl"]
    assert payload["metrics"][0]["definition"]["slug"] == "ratio_tg_hdl"
    assert payload["metrics"][0]["value"] == 3.0
    # "insulina > 8 OR triglicerideos > 100" stays silent: insulina has no value
    titles = [p["definition"]["title"] for p in payload["protocols"]]
    assert titles == ["Recuperação de Ferro"]
    assert payload["unknown_slugs"] == ["hemoglobina"]


def test_evaluate_requires_values(client):
    response = client.post("/api/medical-knowledge/evaluate", json={"biomarkers": []})
    assert response.status_code == 400


def test_invalid_payload_uses_validation_envelope(client):
    response = client.post("/api/medical-knowledge/evaluate", json={"biomarkers": [{"slug": "hdl"}]})
    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"


def test_logical_analysis_is_cached_per_user(client):
    body = {
        "user_id": "user-1",
        "document_ids": ["doc-1"],
        "documents": [
            {
                "documentType": "lab_panel",
                "examDate": "2026-03-01",
                "modules": [
                    {
                        "moduleName": "Bioquímica",
                        "parameters": [
                            {"name": "TGO", "value": "25", "unit": "U/L"},
                            {"name": "Gama GT", "value": "30", "unit": "U/L"},
                            {"name": "Glicose", "value": "88", "unit": "mg/dL"},
                        ],
                    }
                ],
            },
            "garbage",
        ],
    }

    first = client.post("/api/logical-analysis", json=body)
    second = client.post("/api/logical-analysis", json=body)

    assert first.status_code == 200
    assert first.json()["cached"] is False
    assert second.json()["cached"] is True
    fact_base = first.json()["fact_base"]
    assert fact_base["available_parameters"] == ["Gama GT", "Glicose", "TGO"]
    assert [p["definition"]["title"] for p in fact_base["analysis"]["protocols"]] == ["Detox Hepático"]
    assert first.json()["biomarker_snapshot"]["tgo"]["document_id"] == "doc-1"


def test_logical_analysis_without_user_is_not_cached(client):
    response = client.post("/api/logical-analysis", json={"documents": []})
    assert response.status_code == 200
    payload = response.json()
    assert payload["cached"] is False
    assert payload["fact_base"]["analysis_context"] == ""
    assert "Nenhum dado estruturado" in payload["fact_base"]["parameters_context"]


def test_parameter_validation(client):
    response = client.post(
        "/api/validation/parameters",
        json={"text": "TGO está elevado", "available_parameters": ["TSH"]},
    )
    assert response.status_code == 200
    assert response.json()["hallucinated_parameters"] == ["TGO"]


def test_synthesis_validation_rejects_hallucinations(client):
    ok = client.post(
        "/api/validation/synthesis",
        json={"text": "TGO: não disponível. TSH normal.", "available_parameters": ["TSH"]},
    )
    assert ok.status_code == 200
    assert ok.json()["valid"] is True

    rejected = client.post(
        "/api/validation/synthesis",
        json={"text": "TGO está elevado", "available_parameters": ["TSH"]},
    )
    assert rejected.status_code == 422
    payload = rejected.json()
    assert payload["error"] == "SYNTHESIS_VALIDATION_FAILED"
    assert payload["details"]["hallucinated_parameters"] == ["TGO"]
