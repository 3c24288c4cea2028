# tests/engine/test_render.py
"""Tests for area rendering."""

import html
import json
import re

import pytest


@pytest.fixture
def renderer(registry, schemas):
    from tessera.engine.loader import ContentLoader
    from tessera.engine.render import AreaRenderer

    return AreaRenderer(registry, ContentLoader(registry, schemas))


def _attribute(markup: str, name: str) -> dict:
    match = re.search(rf'{name}="([^"]*)"', markup)
    assert match is not None
    return json.loads(html.unescape(match.group(1)))


class TestAreaRenderer:
    @pytest.mark.anyio
    async def test_wraps_widget_markup(self, renderer, make_widget_type, anonymous) -> None:
        from tessera.contracts import Area, WidgetRecord

        make_widget_type("hero-widgets", add_fields=[{"name": "title", "type": "string"}])
        area = Area(items=[WidgetRecord(id="w1", type="hero", fields={"title": "Hi"})])

        markup = await renderer.render_area(anonymous, area)

        assert str(markup) == (
            '<div class="tessera-widget" data-widget-type="hero" '
            'data-widget="{}" data-options="{}"><h1>Hi</h1></div>'
        )

    @pytest.mark.anyio
    async def test_embedded_data_is_escaped_json(
        self, renderer, make_widget_type, anonymous
    ) -> None:
        from tessera.contracts import Area, WidgetRecord

        make_widget_type(
            "hero-widgets", player_data=["title"], add_fields=[{"name": "title", "type": "string"}]
        )
        widget = WidgetRecord(
            id="w1", type="hero", fields={"title": '"><script>'}, derived={"_docs": ["x"]}
        )

        markup = str(
            await renderer.render_area(
                anonymous, Area(items=[widget]), {"hero": {"size": "big", "_pieces": [1]}}
            )
        )

        assert "<script>" not in markup
        assert _attribute(markup, "data-widget") == {"title": '"><script>'}
        assert _attribute(markup, "data-options") == {"size": "big"}

    @pytest.mark.anyio
    async def test_options_passed_to_template(
        self, registry, schemas, store, replayer, anonymous
    ) -> None:
        from tessera.contracts import Area, WidgetRecord
        from tessera.core.permissions import CapabilityPermissions
        from tessera.core.templates import WidgetTemplates
        from tessera.engine.loader import ContentLoader
        from tessera.engine.render import AreaRenderer
        from tessera.widgets.base import BaseWidgetType
        from tessera.widgets.context import WidgetServices

        services = WidgetServices(
            schemas=schemas,
            permissions=CapabilityPermissions(),
            store=store,
            templates=WidgetTemplates(
                templates={
                    "hero-widgets/widget.html": (
                        "{{ options.size }} {{ manager.label }} "
                        "{{ manager.get_widget_classes(widget) | length }}"
                    )
                }
            ),
            replayer=replayer,
        )
        registry.register(BaseWidgetType("hero-widgets", {"label": "Hero"}, services))
        renderer = AreaRenderer(registry, ContentLoader(registry, schemas))

        markup = await renderer.render_area(
            anonymous, Area(items=[WidgetRecord(id="w1", type="hero")]), {"hero": {"size": "big"}}
        )

        assert ">big Hero 0</div>" in str(markup)

    @pytest.mark.anyio
    async def test_unknown_types_skipped(self, renderer, make_widget_type, anonymous) -> None:
        from tessera.contracts import Area, WidgetRecord

        make_widget_type("hero-widgets", add_fields=[{"name": "title", "type": "string"}])
        area = Area(
            items=[
                WidgetRecord(id="x", type="mystery"),
                WidgetRecord(id="w1", type="hero", fields={"title": "Hi"}),
            ]
        )

        markup = str(await renderer.render_area(anonymous, area))

        assert markup.count("tessera-widget") == 1

    @pytest.mark.anyio
    async def test_deferred_widgets_loaded_before_render(
        self, renderer, make_widget_type, registry, store, schemas, anonymous
    ) -> None:
        from tessera.contracts import Area, Document
        from tessera.engine.loader import ContentLoader
        from tessera.widgets.builtin import ImageWidget

        store.insert(Document(id="i1", slug="/i1", type="image", fields={"url": "/a.jpg"}))
        images = make_widget_type("images-widgets", cls=ImageWidget)
        first = await images.sanitize(anonymous, {"imageIds": ["i1"]})
        second = await images.sanitize(anonymous, {"imageIds": ["i1"]})
        page = Document(
            id="p1",
            slug="/",
            type="page",
            fields={"body": Area(items=[first]), "footer": Area(items=[second])},
        )
        await ContentLoader(registry, schemas).load_documents(anonymous, [page])
        schemas.join_calls.clear()

        body = str(await renderer.render_area(anonymous, page.fields["body"]))
        footer = str(await renderer.render_area(anonymous, page.fields["footer"]))

        assert len(schemas.join_calls) == 1
        assert '<img src="/a.jpg">' in body
        assert '<img src="/a.jpg">' in footer
        assert "tessera-widget tessera-images tessera-images--single" in body

    @pytest.mark.anyio
    async def test_template_errors_propagate(self, renderer, make_widget_type, anonymous) -> None:
        from tessera.contracts import Area, WidgetRecord
        from tessera.core.templates import TemplateError

        make_widget_type("quote-widgets")

        with pytest.raises(TemplateError, match="not found"):
            await renderer.render_area(anonymous, Area(items=[WidgetRecord(id="q", type="quote")]))
