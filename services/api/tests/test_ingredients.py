import pytest

from prepclock.models import Ingredient
from prepclock.services import recipes as recipe_service


@pytest.fixture
def recipe(client, user_headers):
    meal = client.post("/api/meals", json={"title": "Stir-fry"}, headers=user_headers).json()["meal"]
    response = client.post(
        "/api/recipes",
        json={
            "mealId": meal["id"],
            "instructions": "Stir-fry everything",
            "ingredients": [
                {"name": "Tofu", "quantity": "2 blocks"},
                {"name": "Broccoli", "quantity": "1 head"},
                {"name": "Soy sauce", "quantity": "1/4 cup"},
            ],
        },
        headers=user_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()["recipe"]


def test_list_ingredients_sorted_by_name(client, user_headers, recipe):
    response = client.get(f"/api/recipes/{recipe['id']}/ingredients", headers=user_headers)
    assert response.status_code == 200
    names = [i["name"] for i in response.json()["ingredients"]]
    assert names == ["Broccoli", "Soy sauce", "Tofu"]


def test_add_ingredient(client, user_headers, recipe):
    response = client.post(
        f"/api/recipes/{recipe['id']}/ingredients",
        json={"name": "  Ginger ", "quantity": " 1 tbsp"},
        headers=user_headers,
    )
    assert response.status_code == 201, response.text
    data = response.json()
    assert data["message"] == "Ingredient created successfully"
    assert data["ingredient"]["name"] == "Ginger"
    assert data["ingredient"]["quantity"] == "1 tbsp"
    assert data["ingredient"]["recipeId"] == recipe["id"]

    names = [
        i["name"]
        for i in client.get(f"/api/recipes/{recipe['id']}/ingredients", headers=user_headers).json()["ingredients"]
    ]
    assert names == ["Broccoli", "Ginger", "Soy sauce", "Tofu"]


def test_add_ingredient_requires_name_and_quantity(client, user_headers, recipe):
    response = client.post(
        f"/api/recipes/{recipe['id']}/ingredients",
        json={"name": "Salt", "quantity": "  "},
        headers=user_headers,
    )
    assert response.status_code == 400
    assert response.json()["error"] == "Name and quantity are required and must be strings"

    response = client.post(
        f"/api/recipes/{recipe['id']}/ingredients", json={"name": "Salt"}, headers=user_headers
    )
    assert response.status_code == 400


def test_replace_ingredients_skips_malformed_items(client, db_session, user_headers, recipe):
    response = client.put(
        f"/api/recipes/{recipe['id']}/ingredients",
        json={
            "ingredients": [
                {"name": "Rice", "quantity": "2 cups"},
                {"name": "", "quantity": "1"},
                {"name": "Eggs"},
                {"name": 3, "quantity": "3"},
                "not an object",
                {"name": " Chili ", "quantity": " 1 "},
            ]
        },
        headers=user_headers,
    )
    assert response.status_code == 200, response.text
    data = response.json()
    assert data["message"] == "Ingredients updated successfully"
    assert [(i["name"], i["quantity"]) for i in data["ingredients"]] == [
        ("Chili", "1"),
        ("Rice", "2 cups"),
    ]

    db_session.expire_all()
    assert db_session.query(Ingredient).filter_by(recipe_id=recipe["id"]).count() == 2


def test_replace_ingredients_with_empty_list_clears(client, user_headers, recipe):
    response = client.put(
        f"/api/recipes/{recipe['id']}/ingredients", json={"ingredients": []}, headers=user_headers
    )
    assert response.status_code == 200
    assert response.json()["ingredients"] == []


def test_replace_ingredients_requires_list(client, user_headers, recipe):
    response = client.put(
        f"/api/recipes/{recipe['id']}/ingredients",
        json={"ingredients": "Rice"},
        headers=user_headers,
    )
    assert response.status_code == 400

    response = client.put(f"/api/recipes/{recipe['id']}/ingredients", json={}, headers=user_headers)
    assert response.status_code == 400


def test_ingredients_of_foreign_recipe_are_not_found(client, db_session, other_user_headers, recipe):
    url = f"/api/recipes/{recipe['id']}/ingredients"

    assert client.get(url, headers=other_user_headers).status_code == 404
    assert client.post(
        url, json={"name": "Salt", "quantity": "1 tsp"}, headers=other_user_headers
    ).status_code == 404

    response = client.put(url, json={"ingredients": []}, headers=other_user_headers)
    assert response.status_code == 404

    # Nothing was deleted
    db_session.expire_all()
    assert db_session.query(Ingredient).filter_by(recipe_id=recipe["id"]).count() == 3


def test_failed_replace_keeps_previous_ingredients(db_session, recipe, monkeypatch):
    def broken_flush(*args, **kwargs):
        raise RuntimeError("disk full")

    monkeypatch.setattr(db_session, "flush", broken_flush)
    with pytest.raises(RuntimeError):
        recipe_service.replace_ingredients(
            db_session, "user_a", recipe["id"], [{"name": "Rice", "quantity": "2 cups"}]
        )
    monkeypatch.undo()

    db_session.expire_all()
    names = sorted(
        i.name for i in db_session.query(Ingredient).filter_by(recipe_id=recipe["id"])
    )
    assert names == ["Broccoli", "Soy sauce", "Tofu"]
