"""Story body markup rules."""

import nh3

# Common block and inline formatting, plus headings and images.
STORY_TAGS = frozenset(
    {
        "address", "article", "aside", "footer", "header", "h1", "h2", "h3", "h4", "h5", "h6",
        "hgroup", "main", "nav", "section", "blockquote", "dd", "div", "dl", "dt", "figcaption",
        "figure", "hr", "li", "ol", "p", "pre", "ul", "a", "abbr", "b", "bdi", "bdo", "br",
        "cite", "code", "data", "dfn", "em", "i", "kbd", "mark", "q", "rp", "rt", "ruby", "s",
        "samp", "small", "span", "strong", "sub", "sup", "time", "u", "var", "wbr", "caption",
        "col", "colgroup", "table", "tbody", "td", "tfoot", "th", "thead", "tr", "img",
    }
)
STORY_ATTRIBUTES = {
    "a": {"href", "name", "target"},
    "img": {"src", "alt"},
}
STORY_URL_SCHEMES = frozenset({"http", "https", "ftp", "mailto", "tel"})


def clean_story_html(content: str) -> str:
    """Drop scripts, event handlers and any tag or attribute outside the allowlist."""
    return nh3.clean(
        content,
        tags=set(STORY_TAGS),
        attributes={tag: set(names) for tag, names in STORY_ATTRIBUTES.items()},
        url_schemes=set(STORY_URL_SCHEMES),
    )
