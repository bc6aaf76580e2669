"""
HTML rendering for the storefront page.

Templates are inline Jinja2 strings loaded into one autoescaping Environment.
"""

from __future__ import annotations

from jinja2 import DictLoader, Environment, select_autoescape

from storefront.views.page import ListingPage

CARD_TEMPLATE = """
{% macro listing_card(card) -%}
<a class="listing-card" href="{{ card.href }}" data-listing-id="{{ card.listing_id }}">
    <div class="listing-image">
        <img src="{{ card.image_url }}" alt="{{ card.title }}" loading="lazy"
             onerror="this.onerror=null;this.src='{{ card.fallback_image_url }}';">
        <span class="condition" style="background: {{ card.condition_color }}">{{ card.condition_label }}</span>
    </div>
    <div class="listing-body">
        <h3>{{ card.title }}</h3>
        <p class="location">{{ card.location }}</p>
        <div class="listing-meta">
            <span class="price">{{ card.price }}</span>
            <span class="views">{{ card.views }} views</span>
        </div>
    </div>
    {% if card.category_name %}<div class="listing-footer"><span class="category">{{ card.category_name }}</span></div>{% endif %}
</a>
{%- endmacro %}
"""

PAGE_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="utf-8">
    <meta name="viewport" content="width=device-width, initial-scale=1">
    {% if page.auto_refresh %}<meta http-equiv="refresh" content="2">{% endif %}
    <title>{{ page.heading }} · Second-Hand Market</title>
    <style>
        body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', sans-serif; margin: 0; background: #fafafa; color: #111827; }
        main { max-width: 1200px; margin: 0 auto; padding: 32px 16px; }
        .hero { text-align: center; padding: 48px 0 32px; }
        .hero h1 { font-size: 40px; margin: 0 0 12px; }
        .hero h1 span { color: #2563eb; }
        .hero p { color: #6b7280; font-size: 18px; }
        .search { display: flex; justify-content: center; gap: 8px; margin-bottom: 24px; }
        .search input { width: 320px; padding: 8px 12px; border: 1px solid #d1d5db; border-radius: 6px; }
        .categories { display: flex; flex-wrap: wrap; gap: 8px; justify-content: center; margin-bottom: 32px; }
        .categories a { padding: 6px 12px; border: 1px solid #d1d5db; border-radius: 6px; text-decoration: none; color: inherit; font-size: 14px; }
        .categories a.selected { background: #2563eb; border-color: #2563eb; color: white; }
        .results-header { display: flex; justify-content: space-between; align-items: center; margin-bottom: 24px; }
        .badge { background: #e5e7eb; border-radius: 9999px; padding: 2px 10px; font-size: 13px; }
        .grid { display: grid; grid-template-columns: repeat(auto-fill, minmax(240px, 1fr)); gap: 24px; }
        .listing-card { display: block; background: white; border-radius: 8px; overflow: hidden; text-decoration: none; color: inherit; box-shadow: 0 1px 2px rgba(0,0,0,.06); }
        .listing-image { position: relative; aspect-ratio: 1; overflow: hidden; }
        .listing-image img { width: 100%; height: 100%; object-fit: cover; }
        .condition { position: absolute; top: 8px; right: 8px; color: white; border-radius: 4px; padding: 2px 8px; font-size: 12px; }
        .listing-body { padding: 16px; }
        .listing-body h3 { margin: 0 0 8px; font-size: 18px; }
        .location, .views { color: #6b7280; font-size: 14px; }
        .listing-meta { display: flex; justify-content: space-between; align-items: center; }
        .price { font-size: 22px; font-weight: 700; color: #2563eb; }
        .listing-footer { padding: 0 16px 16px; }
        .category { border: 1px solid #d1d5db; border-radius: 9999px; padding: 2px 10px; font-size: 12px; }
        .skeleton-card div { background: #e5e7eb; border-radius: 6px; margin-bottom: 12px; }
        .skeleton-image { aspect-ratio: 1; }
        .skeleton-line { height: 16px; }
        .empty { text-align: center; padding: 48px 0; color: #6b7280; font-size: 18px; }
        .notice { max-width: 480px; margin: 0 auto 16px; padding: 12px 16px; border-radius: 6px; background: #fee2e2; color: #991b1b; }
    </style>
</head>
<body>
<main>
    {% for notice in page.notices %}
    <div class="notice notice-{{ notice.variant }}" role="alert"><strong>{{ notice.title }}</strong> {{ notice.description }}</div>
    {% endfor %}

    <section class="hero">
        <h1>Find Amazing <span>Second-Hand</span> Treasures</h1>
        <p>Discover unique items, sell what you don't need, and join the sustainable shopping movement</p>
    </section>

    <form class="search" method="get" action="/">
        <input type="search" name="q" value="{{ page.search or '' }}" placeholder="Search products...">
        {% if page.selected_category != 'all' %}<input type="hidden" name="category" value="{{ page.selected_category }}">{% endif %}
        <button type="submit">Search</button>
    </form>

    <nav class="categories">
        {% for option in page.category_options %}
        <a href="{{ option.href }}"{% if option.selected %} class="selected" aria-current="true"{% endif %}>{{ option.label }}</a>
        {% endfor %}
    </nav>

    <section>
        <div class="results-header">
            <h2>{{ page.heading }}</h2>
            <span class="badge">{{ page.badge }}</span>
        </div>

        {% if page.state.value == 'loading' %}
        <div class="grid">
            {% for _ in range(page.placeholders) %}
            <div class="skeleton-card"><div class="skeleton-image"></div><div class="skeleton-line" style="width: 75%"></div><div class="skeleton-line" style="width: 50%"></div></div>
            {% endfor %}
        </div>
        {% elif page.state.value == 'empty' %}
        <div class="empty"><p>{{ page.empty_message }}</p></div>
        {% else %}
        <div class="grid">
            {% for card in page.cards %}
            {{ listing_card(card) }}
            {% endfor %}
        </div>
        {% endif %}
    </section>
</main>
</body>
</html>
"""

PAGE_TEMPLATE_WITH_MACROS = '{% from "card.html" import listing_card %}' + PAGE_TEMPLATE

PLACEHOLDER_SVG = """<svg xmlns="http://www.w3.org/2000/svg" width="400" height="400" viewBox="0 0 400 400">
<rect width="400" height="400" fill="#e5e7eb"/>
<path d="M140 250l50-60 40 45 30-35 50 50z" fill="#9ca3af"/>
<circle cx="160" cy="160" r="20" fill="#9ca3af"/>
</svg>
"""

environment = Environment(
    loader=DictLoader({"card.html": CARD_TEMPLATE, "page.html": PAGE_TEMPLATE_WITH_MACROS}),
    autoescape=select_autoescape(default=True, default_for_string=True),
    trim_blocks=True,
    lstrip_blocks=True,
)


def render_listing_page(page: ListingPage) -> str:
    """
    Render the listing page to HTML.

    Args:
        page: View-model from build_listing_page()

    Returns:
        str: Complete HTML document
    """
    return environment.get_template("page.html").render(page=page)
