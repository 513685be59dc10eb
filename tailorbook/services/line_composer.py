from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Sequence, Tuple

from ..models.shop_models import CustomLineDraft, OrderLineItem, PredefinedLineDraft


CUSTOM_KIND = "custom"

# Canonical order of the togglable garment lines.
PREDEFINED_LINES: Tuple[Tuple[str, str], ...] = (
    ("shirt", "Shirt"),
    ("pant", "Pant"),
)


def predefined_kinds() -> List[str]:
    return [kind for kind, _ in PREDEFINED_LINES]


def empty_predefined_drafts() -> Dict[str, PredefinedLineDraft]:
    return {kind: PredefinedLineDraft() for kind, _ in PREDEFINED_LINES}


def compose_line_items(
    predefined: Mapping[str, PredefinedLineDraft],
    custom_lines: Iterable[CustomLineDraft],
) -> List[OrderLineItem]:
    items: List[OrderLineItem] = []
    for kind, label in PREDEFINED_LINES:
        draft = predefined.get(kind)
        if draft is None or not draft.enabled:
            continue
        items.append(
            OrderLineItem(
                kind=kind,
                label=label,
                quantity=draft.quantity,
                unit_cost=draft.unit_cost,
            )
        )

    for line in custom_lines:
        items.append(
            OrderLineItem(
                kind=CUSTOM_KIND,
                label=(line.label or "").strip(),
                quantity=line.quantity,
                unit_cost=line.unit_cost,
            )
        )
    return items


def split_line_items(
    items: Sequence[OrderLineItem],
) -> Tuple[Dict[str, PredefinedLineDraft], List[CustomLineDraft]]:
    """Turn a saved line list back into editor drafts.

    Only the leading run of predefined lines, in canonical order, is mapped
    back onto the toggles; anything after it stays a custom line so that
    composing the drafts again yields the same list.
    """
    predefined = empty_predefined_drafts()
    position = 0
    for kind, _ in PREDEFINED_LINES:
        if position < len(items) and items[position].kind == kind:
            item = items[position]
            predefined[kind] = PredefinedLineDraft(
                enabled=True,
                quantity=item.quantity,
                unit_cost=item.unit_cost,
            )
            position += 1

    custom_lines = [
        CustomLineDraft(label=item.label, quantity=item.quantity, unit_cost=item.unit_cost)
        for item in items[position:]
    ]
    return predefined, custom_lines
