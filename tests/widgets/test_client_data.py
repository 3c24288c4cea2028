# tests/widgets/test_client_data.py
"""Tests for markup-embedded data filtering and editor browser data."""

from typing import Any

import pytest
from hypothesis import HealthCheck, given
from hypothesis import settings as hypothesis_settings
from hypothesis import strategies as st

field_names = st.text(alphabet="abcdefgh_", min_size=1, max_size=5)
field_values = st.none() | st.booleans() | st.integers() | st.text(max_size=8)
persistent = st.dictionaries(
    field_names.filter(lambda k: not k.startswith("_")), field_values, max_size=6
)
derived = st.dictionaries(
    field_names.map(lambda k: f"_{k}").filter(lambda k: k != "_id"), field_values, max_size=4
)

# Function-scoped fixtures are rebuilt once per test, not per example; the
# widget types here are immutable so sharing them across examples is fine
fixture_ok = hypothesis_settings(suppress_health_check=[HealthCheck.function_scoped_fixture])


def _widget(fields: dict[str, Any], derived_values: dict[str, Any], *, editable: bool = False):
    from tessera.contracts import WidgetRecord

    widget = WidgetRecord(id="w1", type="hero", fields=dict(fields), derived=dict(derived_values))
    if editable:
        widget.derived["_edit"] = True
    return widget


class TestFilterForDataAttribute:
    """player_data policy."""

    def test_default_policy_gives_nothing(self, make_widget_type) -> None:
        """A non-editing visitor gets `{}` even when the widget has join data."""
        hero = make_widget_type("hero-widgets")
        widget = _widget({"title": "x"}, {"_relatedDocs": [{"_id": "d1", "title": "secret"}]})

        assert hero.filter_for_data_attribute(widget) == {}

    def test_true_gives_permanent_record(self, make_widget_type) -> None:
        hero = make_widget_type("hero-widgets", player_data=True)
        widget = _widget({"title": "x"}, {"_relatedDocs": [1]})

        assert hero.filter_for_data_attribute(widget) == {
            "_id": "w1",
            "type": "hero",
            "metaType": "widget",
            "title": "x",
        }

    def test_list_gives_named_fields(self, make_widget_type) -> None:
        hero = make_widget_type("hero-widgets", player_data=["title", "missing", "_relatedDocs"])
        widget = _widget({"title": "x", "subtitle": "y"}, {"_relatedDocs": [1]})

        assert hero.filter_for_data_attribute(widget) == {"title": "x"}

    def test_editor_gets_everything_permanent(self, make_widget_type) -> None:
        hero = make_widget_type("hero-widgets", player_data=["title"])
        widget = _widget({"title": "x", "subtitle": "y"}, {"_relatedDocs": [1]}, editable=True)

        result = hero.filter_for_data_attribute(widget)

        assert result["subtitle"] == "y"
        assert result["_id"] == "w1"
        assert "_relatedDocs" not in result
        assert "_edit" not in result

    def test_nested_areas_are_stripped(self, make_widget_type) -> None:
        from tessera.contracts import Area, WidgetRecord

        hero = make_widget_type("hero-widgets", player_data=True)
        inner = WidgetRecord(id="w2", type="images", derived={"_images": ["huge"]})
        widget = _widget({"body": Area(items=[inner])}, {})

        body = hero.filter_for_data_attribute(widget)["body"]

        assert body["items"] == [{"_id": "w2", "type": "images", "metaType": "widget"}]

    def test_result_is_a_copy(self, make_widget_type) -> None:
        hero = make_widget_type("hero-widgets", player_data=True)
        widget = _widget({"tags": ["a"]}, {})

        hero.filter_for_data_attribute(widget)["tags"].append("b")

        assert widget.fields["tags"] == ["a"]

    @fixture_ok
    @given(fields=persistent, derived_values=derived)
    def test_false_policy_always_empty(self, make_widget_type, fields, derived_values) -> None:
        hero = make_widget_type("hero-widgets", register=False)

        assert hero.filter_for_data_attribute(_widget(fields, derived_values)) == {}

    @fixture_ok
    @given(fields=persistent, derived_values=derived)
    def test_list_policy_is_intersection(
        self, make_widget_type, fields, derived_values
    ) -> None:
        hero = make_widget_type("hero-widgets", register=False, player_data=["a", "b", "_a"])

        result = hero.filter_for_data_attribute(_widget(fields, derived_values))

        assert set(result) == {"a", "b"} & set(fields)
        assert not any(key.startswith("_") for key in result)

    @fixture_ok
    @given(
        fields=persistent,
        derived_values=derived,
        policy=st.one_of(st.booleans(), st.lists(field_names, max_size=3)),
    )
    def test_editor_always_gets_full_permanent_set(
        self, make_widget_type, fields, derived_values, policy
    ) -> None:
        hero = make_widget_type("hero-widgets", register=False, player_data=policy)

        result = hero.filter_for_data_attribute(_widget(fields, derived_values, editable=True))

        assert result == {"_id": "w1", "type": "hero", "metaType": "widget", **fields}


class TestFilterOptionsForDataAttribute:
    def test_strips_derived_and_callables(self, make_widget_type) -> None:
        hero = make_widget_type("hero-widgets")
        options = {"size": "large", "_pieces": [1], "render": lambda: None}

        assert hero.filter_options_for_data_attribute(options) == {"size": "large"}

    def test_none(self, make_widget_type) -> None:
        assert make_widget_type("hero-widgets").filter_options_for_data_attribute(None) == {}

    def test_no_privilege_distinction(self, make_widget_type) -> None:
        hero = make_widget_type("hero-widgets", player_data=False)

        assert hero.filter_options_for_data_attribute({"a": {"b": 1}}) == {"a": {"b": 1}}


class TestGetBrowserData:
    """Editor runtime descriptor."""

    def test_anonymous_gets_nothing(self, make_widget_type, anonymous) -> None:
        assert make_widget_type("hero-widgets").get_browser_data(anonymous) is None

    def test_descriptor(self, make_widget_type, editor) -> None:
        hero = make_widget_type(
            "hero-widgets",
            label="Hero",
            contextual=True,
            add_fields=[
                {"name": "title", "type": "string", "label": "Title"},
                {"name": "tracking", "type": "string", "permission": "marketing"},
            ],
        )

        data = hero.get_browser_data(editor)

        assert data is not None
        assert data["name"] == "hero"
        assert data["label"] == "Hero"
        assert data["action"] == "/modules/hero-widgets"
        assert data["contextual"] is True
        assert data["skipInitialModal"] is False
        assert [f["name"] for f in data["schema"]] == ["title"]

    def test_action_passed_through(self, make_widget_type, editor) -> None:
        hero = make_widget_type("hero-widgets", action="/api/v1/hero")

        assert hero.get_browser_data(editor)["action"] == "/api/v1/hero"

    def test_browser_option_overrides(self, make_widget_type, editor) -> None:
        hero = make_widget_type(
            "hero-widgets", browser={"label": "Big banner", "icon": "flag"}
        )

        data = hero.get_browser_data(editor)

        assert data["label"] == "Big banner"
        assert data["icon"] == "flag"
        assert data["name"] == "hero"

    @pytest.mark.parametrize("permissions", [frozenset(), frozenset({"anything"})])
    def test_any_authenticated_actor(self, make_widget_type, permissions) -> None:
        from tessera.contracts import Actor, RequestContext

        ctx = RequestContext(actor=Actor(id="u", permissions=permissions))

        assert make_widget_type("hero-widgets").get_browser_data(ctx) is not None
