import pytest

from prepclock.models import Meal, Recipe, Ingredient, TimeEntry, DailyNote, utcnow
from prepclock.services.ownership import owner_of, owned_by, scoped


def _meal_graph(user_id="user_a"):
    meal = Meal(user_id=user_id, title="Prep", date=utcnow())
    recipe = Recipe(instructions="Cook")
    ingredient = Ingredient(name="Rice", quantity="1 cup")
    recipe.ingredients = [ingredient]
    meal.recipes = [recipe]
    return meal, recipe, ingredient


def test_owner_follows_meal_graph():
    meal, recipe, ingredient = _meal_graph()
    assert owner_of(meal) == "user_a"
    assert owner_of(recipe) == "user_a"
    assert owner_of(ingredient) == "user_a"


def test_owner_of_direct_records():
    assert owner_of(TimeEntry(user_id="user_b")) == "user_b"
    assert owner_of(DailyNote(user_id="user_c")) == "user_c"


def test_detached_children_have_no_owner():
    assert owner_of(Recipe(instructions="Loose")) is None
    assert owned_by(Ingredient(name="Salt", quantity="1"), "user_a") is False


def test_owned_by():
    meal, recipe, _ = _meal_graph()
    assert owned_by(recipe, "user_a")
    assert not owned_by(recipe, "user_b")
    assert not owned_by(None, "user_a")


def test_owner_of_unknown_type():
    with pytest.raises(TypeError):
        owner_of(object())


def test_scoped_queries_follow_ownership(db_session):
    mine, _, _ = _meal_graph("user_a")
    theirs, _, _ = _meal_graph("user_b")
    db_session.add_all([mine, theirs])
    db_session.commit()

    assert [m.id for m in scoped(db_session, Meal, "user_a").all()] == [mine.id]
    assert scoped(db_session, Recipe, "user_a").count() == 1
    assert scoped(db_session, Ingredient, "user_b").one().recipe.meal_id == theirs.id
    assert scoped(db_session, Ingredient, "nobody").count() == 0
