"""Tests for API endpoints."""

import pytest


STARTER = {
    "species": "chicken",
    "goal": "growth",
    "age_class": "young",
    "unit_mode": "%",
    "components": [
        {"ingredient_id": "corn", "amount": 70},
        {"ingredient_id": "soybean_meal", "amount": 30},
    ],
}


def nutrient(data, name):
    return next(n for n in data["nutrients"] if n["name"] == name)


class TestIngredientEndpoints:
    """Tests for ingredient catalog endpoints."""

    def test_list_ingredients(self, client):
        response = client.get("/ingredient")
        assert response.status_code == 200
        assert len(response.json()) == 11

    def test_search_ingredients(self, client):
        response = client.get("/ingredient", params={"q": "grain"})
        assert response.status_code == 200
        assert {i["id"] for i in response.json()} == {"corn", "wheat", "barley"}

    def test_get_ingredient(self, client):
        response = client.get("/ingredient/oyster_shell")
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Oyster Shell"
        assert data["price_per_kg"] == 0.1
        calcium = next(n for n in data["nutrients"] if n["name"] == "Calcium")
        assert calcium["value"] == 38.0

    def test_get_ingredient_not_found(self, client):
        response = client.get("/ingredient/unobtainium")
        assert response.status_code == 404


class TestNormEndpoints:
    """Tests for norm endpoints."""

    def test_get_norms(self, client):
        response = client.get("/norm/chicken/growth/young")
        assert response.status_code == 200
        ranges = {r["nutrient"]: r for r in response.json()["ranges"]}
        assert ranges["Protein"]["min"] == 20
        assert ranges["Protein"]["max"] == 23
        assert len(ranges) == 6

    def test_norms_missing_combination(self, client):
        response = client.get("/norm/chicken/maintenance/young")
        assert response.status_code == 404

    def test_norms_invalid_species(self, client):
        response = client.get("/norm/ostrich/growth/young")
        assert response.status_code == 422


class TestMixCalculation:
    """Tests for mix calculation."""

    def test_calculate_starter_mix(self, client):
        """Test the 70/30 corn-soy mix for young growing chickens."""
        response = client.post("/mix/calculate", json=STARTER)
        assert response.status_code == 200
        data = response.json()

        protein = nutrient(data, "Protein")
        assert protein["value"] == pytest.approx(19.75)
        assert protein["status"] == "deficit"
        assert nutrient(data, "Energy")["value"] == pytest.approx(3020)
        assert nutrient(data, "Energy")["status"] == "ok"

        kinds = {f["nutrient"]: f["kind"] for f in data["findings"]}
        assert kinds["Protein"] == "deficit"
        assert "Energy" not in kinds

        assert data["cost_per_kg"] == pytest.approx(0.26)
        assert data["total_amount"] == 100
        assert data["is_valid"] is True
        assert data["has_norms"] is True

    def test_calculate_oyster_shell(self, client):
        response = client.post("/mix/calculate", json={
            "species": "chicken",
            "goal": "egg_laying",
            "age_class": "laying",
            "components": [{"ingredient_id": "oyster_shell", "amount": 100}],
        })
        assert response.status_code == 200
        data = response.json()
        calcium = next(f for f in data["findings"] if f["nutrient"] == "Calcium")
        assert calcium["kind"] == "excess"
        assert calcium["message"].startswith("Excess in Calcium")
        assert data["cost_per_kg"] == pytest.approx(0.1)

    def test_calculate_empty_mix(self, client):
        response = client.post("/mix/calculate", json={
            "species": "duck", "goal": "growth", "age_class": "young", "components": []
        })
        assert response.status_code == 200
        data = response.json()
        assert data["nutrients"] == []
        assert data["findings"] == []
        assert data["cost_per_kg"] == 0
        assert data["is_valid"] is False

    def test_calculate_default_unit_mode(self, client):
        payload = dict(STARTER)
        payload.pop("unit_mode")
        response = client.post("/mix/calculate", json=payload)
        assert response.json()["unit_mode"] == "%"

    def test_calculate_mass_mode(self, client):
        response = client.post("/mix/calculate", json={
            **STARTER,
            "unit_mode": "kg",
            "components": [
                {"ingredient_id": "corn", "amount": 7},
                {"ingredient_id": "soybean_meal", "amount": 3},
            ],
        })
        data = response.json()
        assert nutrient(data, "Protein")["value"] == pytest.approx(19.75)
        assert data["cost_per_kg"] == pytest.approx(0.26)
        assert data["is_valid"] is True

    def test_calculate_grams_matches_kg(self, client):
        """Test a mix entered in grams blends and costs like the same mix in kg."""
        kg_mix = client.post("/mix/calculate", json={
            **STARTER,
            "unit_mode": "kg",
            "components": [
                {"ingredient_id": "corn", "amount": 7},
                {"ingredient_id": "soybean_meal", "amount": 3},
            ],
        }).json()
        gram_mix = client.post("/mix/calculate", json={
            **STARTER,
            "unit_mode": "kg",
            "mass_unit": "g",
            "components": [
                {"ingredient_id": "corn", "amount": 7000},
                {"ingredient_id": "soybean_meal", "amount": 3000},
            ],
        }).json()

        for row in kg_mix["nutrients"]:
            assert nutrient(gram_mix, row["name"])["value"] == pytest.approx(row["value"])
        assert gram_mix["cost_per_kg"] == pytest.approx(kg_mix["cost_per_kg"])
        assert gram_mix["total_amount"] == pytest.approx(10)

    def test_mass_unit_ignored_in_percent_mode(self, client):
        response = client.post("/mix/calculate", json={**STARTER, "mass_unit": "g"})
        data = response.json()
        assert data["total_amount"] == 100
        assert nutrient(data, "Protein")["value"] == pytest.approx(19.75)

    def test_calculate_profile_without_norms(self, client):
        response = client.post("/mix/calculate", json={
            **STARTER, "goal": "maintenance"
        })
        data = response.json()
        assert data["has_norms"] is False
        assert data["findings"] == []
        assert nutrient(data, "Protein")["status"] is None

    def test_calculate_unknown_ingredient(self, client):
        response = client.post("/mix/calculate", json={
            **STARTER, "components": [{"ingredient_id": "sawdust", "amount": 100}]
        })
        assert response.status_code == 404

    def test_calculate_negative_amount(self, client):
        response = client.post("/mix/calculate", json={
            **STARTER, "components": [{"ingredient_id": "corn", "amount": -5}]
        })
        assert response.status_code == 422


class TestAutoSuggest:
    """Tests for the protein auto-suggest endpoint."""

    def test_adds_soybean_meal(self, client):
        response = client.post("/mix/auto-suggest", json={
            **STARTER, "components": [{"ingredient_id": "corn", "amount": 100}]
        })
        assert response.status_code == 200
        data = response.json()
        assert data["added_ingredient_id"] == "soybean_meal"
        assert [c["ingredient_id"] for c in data["components"]] == ["corn", "soybean_meal"]
        assert data["calculation"]["total_amount"] == 110

    def test_idempotent(self, client):
        first = client.post("/mix/auto-suggest", json={
            **STARTER, "components": [{"ingredient_id": "corn", "amount": 100}]
        }).json()
        components = [
            {"ingredient_id": c["ingredient_id"], "amount": c["amount"]}
            for c in first["components"]
        ]
        second = client.post("/mix/auto-suggest", json={**STARTER, "components": components})
        data = second.json()
        assert data["added_ingredient_id"] is None
        assert len(data["components"]) == 2


class TestSavedMixes:
    """Tests for saving and reading mixes."""

    def test_save_mix(self, client):
        response = client.post("/mix", json={**STARTER, "name": "Chick starter", "bird_weight_kg": 0.5})
        assert response.status_code == 201
        data = response.json()
        assert data["id"] is not None
        assert data["name"] == "Chick starter"
        assert data["cost_per_kg"] == pytest.approx(0.26)
        assert data["currency"] == "USD"
        assert [c["ingredient_id"] for c in data["components"]] == ["corn", "soybean_meal"]
        protein = next(n for n in data["blended_nutrients"] if n["name"] == "Protein")
        assert protein["value"] == pytest.approx(19.75)

    def test_save_mix_default_name(self, client):
        response = client.post("/mix", json=STARTER)
        assert response.status_code == 201
        assert response.json()["name"].startswith("Mix ")

    def test_save_invalid_percent_total(self, client):
        response = client.post("/mix", json={
            **STARTER,
            "components": [
                {"ingredient_id": "corn", "amount": 70},
                {"ingredient_id": "soybean_meal", "amount": 20},
            ],
        })
        assert response.status_code == 400
        assert "sum to 100%" in response.json()["detail"]

    def test_save_invalid_mass_mix(self, client):
        response = client.post("/mix", json={
            **STARTER,
            "unit_mode": "kg",
            "components": [{"ingredient_id": "corn", "amount": 0}],
        })
        assert response.status_code == 400

    def test_save_grams_mix_stored_in_kg(self, client):
        response = client.post("/mix", json={
            **STARTER,
            "unit_mode": "kg",
            "mass_unit": "g",
            "components": [{"ingredient_id": "corn", "amount": 2500}],
        })
        assert response.status_code == 201
        component = response.json()["components"][0]
        assert component["amount"] == pytest.approx(2.5)
        assert component["unit"] == "kg"

    def test_mixes_are_appended(self, client):
        client.post("/mix", json={**STARTER, "name": "First"})
        client.post("/mix", json={**STARTER, "name": "Second"})
        response = client.get("/mix")
        assert response.status_code == 200
        assert [m["name"] for m in response.json()] == ["First", "Second"]

    def test_get_mix(self, client):
        mix_id = client.post("/mix", json=STARTER).json()["id"]
        response = client.get(f"/mix/{mix_id}")
        assert response.status_code == 200
        assert response.json()["species"] == "chicken"

    def test_get_mix_not_found(self, client):
        response = client.get("/mix/999")
        assert response.status_code == 404

    def test_mix_report(self, client):
        mix_id = client.post("/mix", json={**STARTER, "name": "Starter"}).json()["id"]
        response = client.get(f"/mix/{mix_id}/report")
        assert response.status_code == 200
        text = response.text
        assert "Starter" in text
        assert "Corn/Maize: 70.0%" in text
        assert "Deficit in Protein" in text


class TestFlockReport:
    """Tests for the flock feeding report."""

    def test_flock_report_from_mix(self, client):
        mix_id = client.post("/mix", json={**STARTER, "bird_weight_kg": 2.0}).json()["id"]
        response = client.post("/report/flock", json={"flock_size": 100, "mix_id": mix_id})
        assert response.status_code == 200
        data = response.json()
        # 100 birds * 2 kg * 0.12 = 24 kg, at 0.26 per kg
        assert data["daily_feed_kg"] == pytest.approx(24.0)
        assert data["daily_cost"] == pytest.approx(6.24)

    def test_flock_report_explicit_values(self, client):
        response = client.post("/report/flock", json={
            "flock_size": 50, "bird_weight_kg": 1.5
        })
        data = response.json()
        assert data["daily_feed_kg"] == pytest.approx(9.0)
        assert data["daily_cost"] is None

    def test_flock_report_requires_weight(self, client):
        mix_id = client.post("/mix", json=STARTER).json()["id"]
        response = client.post("/report/flock", json={"flock_size": 10, "mix_id": mix_id})
        assert response.status_code == 400

    def test_flock_report_mix_not_found(self, client):
        response = client.post("/report/flock", json={"flock_size": 10, "mix_id": 999})
        assert response.status_code == 404


class TestHealthEndpoints:
    """Tests for health and root endpoints."""

    def test_root(self, client):
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "name" in data
        assert "endpoints" in data

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"
