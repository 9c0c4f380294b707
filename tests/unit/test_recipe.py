import pytest

from application.preprocessing import (
    NearZeroVariance,
    OrdinalScore,
    Recipe,
    RemoveColumns,
    SqrtTransform,
    UpdateRole,
    build_recipe,
)

pytestmark = pytest.mark.unit


def test_default_recipe_step_order():
    recipe = build_recipe(nzv_threshold=1e-4)

    assert recipe.outcome == "log_price"
    assert [type(s) for s in recipe.steps] == [UpdateRole, OrdinalScore, RemoveColumns, SqrtTransform, NearZeroVariance]

    role, ordinal, remove, sqrt, nzv = recipe.steps
    assert role.columns == ("price",) and role.role == "reference"
    assert set(ordinal.columns) == {"cut", "color", "clarity"}
    assert remove.columns == ("x", "y", "z")
    assert sqrt.columns == ("carat",)
    assert nzv.threshold == 1e-4


def test_recipe_json_serialization():
    recipe = build_recipe(nzv_threshold=0.01)

    payload = recipe.to_dict()
    assert [s["kind"] for s in payload["steps"]] == ["update_role", "ordinal_score", "remove_columns", "sqrt", "nzv"]

    restored = Recipe.from_json(recipe.to_json())
    assert restored == recipe


def test_recipe_from_dict_rejects_unknown_step():
    with pytest.raises(ValueError, match="Unknown recipe step"):
        Recipe.from_dict({"outcome": "log_price", "steps": [{"kind": "pca", "num_comp": 2}]})


def test_recipe_is_immutable():
    recipe = build_recipe()
    with pytest.raises(AttributeError):
        recipe.outcome = "price"
