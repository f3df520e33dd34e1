from stepcalc.api import build_catalog, run_evaluation


def test_post_evaluate(client):
    response = client.post("/evaluate", json={"expression": "2+3*4"})
    assert response.status_code == 200
    data = response.json()
    assert data["expression"] == "2 + 3 * 4"
    assert data["result"] == 14
    assert data["display"] == "14"
    assert data["steps"] == []


def test_post_evaluate_detailed(client):
    response = client.post("/evaluate", json={"expression": "comb(8,3)", "detailed": True})
    assert response.status_code == 200
    data = response.json()
    assert data["result"] == 56
    assert data["steps"] == [{"operation": "comb(8, 3)", "result": 56.0, "display": "56"}]


def test_get_evaluate(client):
    response = client.get("/evaluate", params={"expression": "2^3^2", "detailed": "true"})
    assert response.status_code == 200
    data = response.json()
    assert data["result"] == 512
    assert [s["operation"] for s in data["steps"]] == ["3 ^ 2", "2 ^ 9"]


def test_non_finite_result_is_null(client):
    response = client.post("/evaluate", json={"expression": "10 ^ 400"})
    assert response.status_code == 200
    data = response.json()
    assert data["result"] is None
    assert data["display"] == "inf"


def test_calculator_error_is_400(client):
    response = client.post("/evaluate", json={"expression": "5 / 0"})
    assert response.status_code == 400
    assert response.json() == {"detail": "Division by zero", "error": "DivisionByZero"}


def test_lex_error_is_400(client):
    response = client.get("/evaluate", params={"expression": "1 @ 2"})
    assert response.status_code == 400
    assert response.json()["error"] == "UnknownCharacter"


def test_blank_post_expression_is_rejected(client):
    response = client.post("/evaluate", json={"expression": "   "})
    assert response.status_code == 422


def test_blank_get_expression_is_empty_input(client):
    response = client.get("/evaluate", params={"expression": " "})
    assert response.status_code == 400
    assert response.json()["error"] == "EmptyInput"


def test_missing_get_expression_is_rejected(client):
    response = client.get("/evaluate")
    assert response.status_code == 422


def test_functions_catalog(client):
    response = client.get("/functions")
    assert response.status_code == 200
    data = response.json()
    names = {f["name"]: f for f in data["functions"]}
    assert "sqrt" in names
    assert names["fact"]["aliases"] == ["factorial"]
    assert "factorial" not in names
    assert set(data["constants"]) == {"pi", "e"}


def test_run_evaluation_formats_steps():
    result = run_evaluation("-5", detailed=True)
    assert result.steps[0].operation == "-5"
    assert result.steps[0].result == -5


def test_build_catalog_has_one_entry_per_function():
    catalog = build_catalog()
    names = [f.name for f in catalog.functions]
    assert len(names) == len(set(names))
