"""Engine: nested content loading, area rendering and site wiring."""

from tessera.engine.bootstrap import Site, build_site
from tessera.engine.loader import ContentLoader
from tessera.engine.render import AreaRenderer
from tessera.engine.walker import each_widget, iter_widgets

__all__ = [
    "AreaRenderer",
    "ContentLoader",
    "Site",
    "build_site",
    "each_widget",
    "iter_widgets",
]
