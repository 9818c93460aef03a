import json

import pytest

from grocery_voice.core.grocery_tools import build_grocery_registry


@pytest.fixture
def items(grocery_items):
    return grocery_items


@pytest.fixture
def registry(items, oracle):
    return build_grocery_registry(items, oracle)


def run(registry, call):
    output = registry.dispatch(call)
    return None if output is None else json.loads(output)


def test_registers_all_tools(registry):
    assert registry.names() == ["addItem", "removeItem", "markCompleted", "getList", "comparePrices"]


def test_add_item_then_get_list_has_one_more(registry, items, tool_call):
    before = run(registry, tool_call("getList"))["items"]

    result = run(registry, tool_call("addItem", name="Pasta"))

    after = run(registry, tool_call("getList"))["items"]
    assert result["success"] is True
    assert len(after) == len(before) + 1
    added = after[-1]
    assert added["name"] == "Pasta"
    assert added["completed"] is False
    assert added["quantity"] == 1
    assert added["id"] not in {item["id"] for item in before}


def test_add_item_mutates_the_callers_list(registry, items, tool_call):
    count = len(items)
    run(registry, tool_call("addItem", name="Eggs", quantity=12))
    assert len(items) == count + 1
    assert items[-1].name == "Eggs"


def test_add_item_uses_price_estimate(registry, items, tool_call):
    result = run(registry, tool_call("addItem", name="Milk"))
    assert result["item"]["priceEstimate"] == 3.79
    assert result["item"]["store"] == "Kroger"


def test_add_item_without_price_data(registry, tool_call):
    result = run(registry, tool_call("addItem", name="Kale"))
    assert result["item"]["priceEstimate"] is None
    assert result["item"]["store"] is None


def test_add_item_coerces_quantity(registry, items, tool_call):
    run(registry, tool_call("addItem", name="Pasta", quantity="2", unit="boxes"))
    assert items[-1].quantity == 2
    assert items[-1].unit == "boxes"


def test_add_item_rejects_non_positive_quantity(registry, items, tool_call):
    count = len(items)
    result = run(registry, tool_call("addItem", name="Pasta", quantity=0))
    assert result["success"] is False
    assert "quantity" in result["message"]
    assert len(items) == count


def test_add_item_requires_name(registry, items, tool_call):
    result = run(registry, tool_call("addItem", quantity=2))
    assert result["success"] is False
    assert "name" in result["message"]


def test_remove_item_removes_first_match_only(registry, items, tool_call):
    first_milk, bread, second_milk = items

    result = run(registry, tool_call("removeItem", name="MILK"))

    assert result["success"] is True
    assert items == [bread, second_milk]


def test_remove_missing_item_leaves_list_unchanged(registry, items, tool_call):
    snapshot = list(items)
    result = run(registry, tool_call("removeItem", name="Caviar"))
    assert result == {"success": False, "message": "Could not find Caviar in your list"}
    assert items == snapshot


def test_mark_completed_is_idempotent(registry, items, tool_call):
    count = len(items)
    first = run(registry, tool_call("markCompleted", name="bread"))
    second = run(registry, tool_call("markCompleted", name="Bread"))
    assert first["success"] is True
    assert second["success"] is True
    assert items[1].completed is True
    assert len(items) == count


def test_mark_completed_targets_first_match(registry, items, tool_call):
    run(registry, tool_call("markCompleted", name="milk"))
    assert items[0].completed is True
    assert items[2].completed is False


def test_mark_completed_missing_item(registry, tool_call):
    result = run(registry, tool_call("markCompleted", name="Caviar"))
    assert result["success"] is False


def test_compare_prices_for_milk(registry, tool_call):
    result = run(registry, tool_call("comparePrices", name="milk"))
    assert result["success"] is True
    assert result["cheapest"] == {"price": 3.79, "store": "Kroger"}
    assert [q["store"] for q in result["quotes"]] == ["Walmart", "Target", "Kroger"]


def test_compare_prices_without_data_is_a_failure_result(registry, tool_call):
    result = run(registry, tool_call("comparePrices", name="kale"))
    assert result["success"] is False
    assert "kale" in result["message"]


def test_unknown_tool_is_skipped(registry, items, tool_call):
    snapshot = list(items)
    assert registry.dispatch(tool_call("deleteEverything")) is None
    assert items == snapshot


def test_tool_definitions_describe_arguments(registry):
    definitions = {d.name: d for d in registry.get_all_tool_definitions()}

    add = definitions["addItem"].parameters
    assert add["required"] == ["name"]
    assert add["properties"]["quantity"]["default"] == 1
    assert "title" not in add
    assert "title" not in add["properties"]["name"]

    assert definitions["getList"].parameters["properties"] == {}
    assert definitions["markCompleted"].description == "Mark an item as completed/purchased"
