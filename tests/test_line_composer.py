from tailorbook.models.shop_models import CustomLineDraft, OrderLineItem, PredefinedLineDraft
from tailorbook.services.line_composer import (
    CUSTOM_KIND,
    compose_line_items,
    empty_predefined_drafts,
    predefined_kinds,
    split_line_items,
)


class TestComposeLineItems:
    def test_predefined_kinds_are_shirt_then_pant(self):
        assert predefined_kinds() == ["shirt", "pant"]

    def test_nothing_enabled_yields_empty_list(self):
        assert compose_line_items(empty_predefined_drafts(), []) == []

    def test_canonical_order_regardless_of_mapping_order(self):
        predefined = {
            "pant": PredefinedLineDraft(enabled=True, quantity=1, unit_cost=600),
            "shirt": PredefinedLineDraft(enabled=True, quantity=2, unit_cost=500),
        }
        items = compose_line_items(predefined, [CustomLineDraft(label="Blazer", quantity=1, unit_cost=1500)])

        assert [item.kind for item in items] == ["shirt", "pant", CUSTOM_KIND]
        assert items[0] == OrderLineItem(kind="shirt", label="Shirt", quantity=2, unit_cost=500)
        assert items[2].label == "Blazer"

    def test_disabled_toggle_is_skipped(self):
        predefined = empty_predefined_drafts()
        predefined["pant"] = PredefinedLineDraft(enabled=True, quantity=1, unit_cost=700)
        items = compose_line_items(predefined, [])
        assert [item.kind for item in items] == ["pant"]

    def test_custom_lines_keep_entry_order_and_trim_labels(self):
        custom = [
            CustomLineDraft(label=" Kurta ", quantity=1, unit_cost=900),
            CustomLineDraft(label="", quantity=2, unit_cost=50),
        ]
        items = compose_line_items({}, custom)
        assert [item.label for item in items] == ["Kurta", ""]
        assert all(item.kind == CUSTOM_KIND for item in items)


class TestSplitLineItems:
    def test_split_then_compose_restores_items(self):
        saved_items = [
            OrderLineItem(kind="shirt", label="Shirt", quantity=2, unit_cost=500),
            OrderLineItem(kind="pant", label="Pant", quantity=1, unit_cost=650),
            OrderLineItem(kind=CUSTOM_KIND, label="Blazer", quantity=1, unit_cost=1500),
        ]
        predefined, custom = split_line_items(saved_items)

        assert predefined["shirt"].enabled and predefined["pant"].enabled
        assert custom == [CustomLineDraft(label="Blazer", quantity=1, unit_cost=1500)]
        assert compose_line_items(predefined, custom) == saved_items

    def test_only_custom_lines(self):
        predefined, custom = split_line_items(
            [OrderLineItem(kind=CUSTOM_KIND, label="Sherwani", quantity=1, unit_cost=4000)]
        )
        assert not predefined["shirt"].enabled
        assert not predefined["pant"].enabled
        assert len(custom) == 1
