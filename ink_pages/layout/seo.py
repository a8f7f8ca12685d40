"""Render search-engine metadata for a page's document head.

:class:`SeoRenderer` turns a :class:`~ink_pages.parser.models.SeoConfig`
into ``<meta>``/``<link>`` tags and a JSON-LD ``WebPage`` description.
Open Graph and Twitter tags come from the explicit ``og``/``twitter`` maps
when given, otherwise from the title, description and image.
"""

from __future__ import annotations

import json
import typing as typ

from markupsafe import Markup, escape

if typ.TYPE_CHECKING:
    from ..parser.models import PageConfig, SeoConfig

TWITTER_CARD = "summary_large_image"


def _meta(kind: str, identifier: str, content: str) -> Markup:
    return Markup('<meta {}="{}" content="{}">').format(
        Markup(kind), identifier, content
    )


class SeoRenderer:
    """Render SEO tags, structured data, and the document title."""

    def __init__(self, app_name: str) -> None:
        self.app_name = app_name

    def title(
        self, config: PageConfig, extracted_title: str | None = None
    ) -> str:
        """Resolve the document title.

        The SEO title wins, then the ``title(...)`` config call, then a
        ``<title>`` authored in the page body, then the application name.
        """
        seo_title = config.seo.title if config.seo else None
        return seo_title or config.title or extracted_title or self.app_name

    def meta_tags(self, seo: SeoConfig | None) -> Markup:
        """Return the meta and canonical link tags for ``seo``."""
        if seo is None:
            return Markup("")
        tags: list[Markup] = []
        for name in ("description", "keywords", "robots"):
            if value := getattr(seo, name):
                tags.append(_meta("name", name, value))
        if seo.canonical:
            tags.append(
                Markup('<link rel="canonical" href="{}">').format(seo.canonical)
            )
        og = seo.og or {
            "title": seo.title or "",
            "description": seo.description or "",
            "image": seo.image or "",
        }
        tags.extend(
            _meta("property", f"og:{key}", value) for key, value in og.items() if value
        )
        twitter = seo.twitter or {
            "card": TWITTER_CARD,
            "title": seo.title or "",
            "description": seo.description or "",
            "image": seo.image or "",
        }
        tags.extend(
            _meta("name", f"twitter:{key}", value)
            for key, value in twitter.items()
            if value
        )
        tags.extend(
            _meta("name", key, value) for key, value in seo.meta.items() if value
        )
        return Markup("\n").join(tags)

    def structured_data(self, seo: SeoConfig | None) -> Markup:
        """Return a JSON-LD ``WebPage`` script for ``seo``, or empty markup."""
        if seo is None:
            return Markup("")
        data: dict[str, str] = {
            "@context": "https://schema.org",
            "@type": "WebPage",
        }
        for key, value in (
            ("name", seo.title),
            ("description", seo.description),
            ("url", seo.canonical),
            ("image", seo.image),
        ):
            if value:
                data[key] = value
        payload = json.dumps(data, ensure_ascii=False, indent=2).replace("</", "<\\/")
        return Markup('<script type="application/ld+json">{}</script>').format(
            Markup(payload)
        )


__all__ = ["SeoRenderer"]
