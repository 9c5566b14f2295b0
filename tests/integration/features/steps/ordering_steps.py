"""Step definitions for the card ordering scenarios.

Steps talk to the API through ``context.client`` and keep a map from the
labels used in the feature files to public ids.
"""

from __future__ import annotations

import os
from typing import Any, List, Tuple

from behave import given, then, when
from sqlalchemy import insert

from kanban_order.logic.repository_positions import generate_public_id
from kanban_order.main import API_PREFIX
from kanban_order.models.entities import Board


def _labels(text: str) -> List[str]:
    return [part.strip() for part in text.split(",") if part.strip()]


def _expected_layout(text: str) -> List[Tuple[str, int]]:
    pairs = []
    for part in _labels(text):
        title, index = part.split(":")
        pairs.append((title.strip(), int(index)))
    return pairs


def _create_card(context: Any, list_label: str, title: str, position: Any = "end") -> Any:
    list_public_id = context.lists[list_label]
    resp = context.client.post(
        f"{API_PREFIX}/lists/{list_public_id}/cards",
        json={"title": title, "position": position},
    )
    if resp.status_code == 201:
        context.cards[title] = resp.json()["public_id"]
    return resp


@given("a board exists")
def step_board_exists(context: Any) -> None:
    public_id = generate_public_id()
    with context.engine.begin() as conn:
        conn.execute(insert(Board.__table__).values(public_id=public_id, name="Integration"))
    context.board_public_id = public_id


@given('an empty list "{name}"')
def step_empty_list(context: Any, name: str) -> None:
    resp = context.client.post(f"{API_PREFIX}/boards/{context.board_public_id}/lists", json={"name": name})
    assert resp.status_code == 201, resp.text
    context.lists[name] = resp.json()["public_id"]


@given('a list "{name}" with cards "{titles}"')
def step_list_with_cards(context: Any, name: str, titles: str) -> None:
    step_empty_list(context, name)
    for title in _labels(titles):
        created = _create_card(context, name, title)
        assert created.status_code == 201, created.text


@given("out-of-range placement is rejected")
def step_guard_enabled(context: Any) -> None:
    os.environ["ORDERING_REJECT_OUT_OF_RANGE"] = "true"


@when('I move card "{title}" to index {index:d}')
def step_move_within_list(context: Any, title: str, index: int) -> None:
    context.response = context.client.patch(
        f"{API_PREFIX}/cards/{context.cards[title]}/position",
        json={"index": index},
    )


@when('I move card "{title}" to list "{list_label}" at index {index:d}')
def step_move_across_lists(context: Any, title: str, list_label: str, index: int) -> None:
    context.response = context.client.patch(
        f"{API_PREFIX}/cards/{context.cards[title]}/position",
        json={"index": index, "list_public_id": context.lists[list_label]},
    )


@when('I delete card "{title}"')
def step_delete_card(context: Any, title: str) -> None:
    context.response = context.client.delete(f"{API_PREFIX}/cards/{context.cards[title]}")


@when('I create card "{title}" in list "{list_label}" at "{placement}"')
def step_create_card(context: Any, title: str, list_label: str, placement: str) -> None:
    position: Any = int(placement) if placement.isdigit() else placement
    context.response = _create_card(context, list_label, title, position)


@then("the response status is {status:d}")
def step_status(context: Any, status: int) -> None:
    assert context.response is not None, "no request was made"
    assert context.response.status_code == status, context.response.text


@then('the response status is {status:d} with code "{code}"')
def step_status_with_code(context: Any, status: int, code: str) -> None:
    step_status(context, status)
    assert context.response.headers["content-type"].startswith("application/problem+json")
    assert context.response.json()["code"] == code


@then('list "{list_label}" has cards "{layout}"')
def step_list_layout(context: Any, list_label: str, layout: str) -> None:
    resp = context.client.get(f"{API_PREFIX}/lists/{context.lists[list_label]}/cards")
    assert resp.status_code == 200, resp.text
    actual = [(card["title"], card["index"]) for card in resp.json()]
    assert actual == _expected_layout(layout), actual
