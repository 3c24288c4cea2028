# tests/engine/test_walker.py
"""Tests for nested widget walking and the list task."""

import pytest

PAGE = {
    "_id": "home",
    "slug": "/",
    "type": "page",
    "body": {
        "metaType": "area",
        "items": [
            {"_id": "h1", "type": "hero", "title": "Welcome"},
            {
                "_id": "c1",
                "type": "columns",
                "left": {
                    "metaType": "area",
                    "items": [{"_id": "h2", "type": "hero", "title": "Nested"}],
                },
            },
        ],
    },
    "sidebar": {"metaType": "area", "items": [{"_id": "t1", "type": "rich-text"}]},
}


def _page(data: dict = PAGE):
    from tessera.contracts import Document

    return Document.from_dict(data)


class TestIterWidgets:
    def test_depth_first_with_dot_paths(self) -> None:
        from tessera.engine.walker import iter_widgets

        found = [(w.id, path) for w, path in iter_widgets(_page())]

        assert found == [
            ("h1", "body.items.0"),
            ("c1", "body.items.1"),
            ("h2", "body.items.1.left.items.0"),
            ("t1", "sidebar.items.0"),
        ]

    def test_areas_inside_arrays_and_objects(self) -> None:
        from tessera.engine.walker import iter_widgets

        page = _page(
            {
                "_id": "p",
                "slug": "/p",
                "type": "page",
                "tabs": [
                    {"label": "One", "content": {"metaType": "area", "items": [{"_id": "a", "type": "hero"}]}}
                ],
                "meta": {"promo": {"metaType": "area", "items": [{"_id": "b", "type": "hero"}]}},
            }
        )

        found = [(w.id, path) for w, path in iter_widgets(page)]

        assert found == [("a", "tabs.0.content.items.0"), ("b", "meta.promo.items.0")]

    def test_record_itself_not_yielded(self) -> None:
        from tessera.contracts import WidgetRecord
        from tessera.engine.walker import iter_widgets

        assert list(iter_widgets(WidgetRecord(id="w", type="hero"))) == []

    def test_can_stop_at_virtual_widgets(self) -> None:
        from tessera.contracts import Document
        from tessera.engine.walker import iter_widgets

        page = Document.from_dict(PAGE)
        page.fields["body"].items[1].virtual = True

        found = [path for _w, path in iter_widgets(page, into_virtual=False)]

        assert found == ["body.items.0", "body.items.1", "sidebar.items.0"]


class TestListTask:
    """`<module>:list` prints every occurrence of one widget type."""

    @pytest.mark.anyio
    async def test_lists_matching_occurrences(self, make_widget_type, store) -> None:
        from tessera.contracts import Document

        store.insert(_page())
        store.insert(
            Document.from_dict(
                {
                    "_id": "about",
                    "slug": "/about",
                    "type": "page",
                    "body": {"metaType": "area", "items": [{"_id": "h3", "type": "hero"}]},
                }
            )
        )
        hero = make_widget_type("hero-widgets")
        lines: list[str] = []

        await hero.list(lines.append)

        assert lines == [
            "/:body.items.0",
            "/:body.items.1.left.items.0",
            "/about:body.items.0",
        ]

    @pytest.mark.anyio
    async def test_read_only(self, make_widget_type, store) -> None:
        page = _page()
        store.insert(page)
        before = page.to_dict()

        await make_widget_type("hero-widgets").list(lambda line: None)

        assert page.to_dict() == before

    @pytest.mark.anyio
    async def test_no_occurrences(self, make_widget_type, store) -> None:
        store.insert(_page())
        lines: list[str] = []

        await make_widget_type("quote-widgets").list(lines.append)

        assert lines == []
