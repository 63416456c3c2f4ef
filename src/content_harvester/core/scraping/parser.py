"""HTML parsing helpers: meta refresh detection and page metadata.

See http://redirectdetective.com/redirection-types.html for the kind of
"application level" redirect handled here.
"""

from __future__ import annotations

import re
from typing import Optional, Tuple, Union

from bs4 import BeautifulSoup

# matches the 'content' attribute of a tag like this:
#   <meta http-equiv="refresh" content="2;url=https://www.google.com">
META_REFRESH_CONTENT_RE = re.compile(r"^(\d*)\s*;\s*url=(.*)$", re.IGNORECASE | re.DOTALL)

Markup = Union[str, bytes]


def _soup(html: Markup) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _find_meta_refresh_tag(soup: BeautifulSoup):
    """Return the first `<meta http-equiv="refresh">` inside the document head.

    `html.parser` does not synthesize a `<head>`, so for documents without
    one every meta element outside `<body>` counts as part of the head.
    """
    head = soup.head
    scope = head if head is not None else soup
    for meta in scope.find_all("meta"):
        if head is None and meta.find_parent("body") is not None:
            continue
        equiv = meta.get("http-equiv")
        if equiv is not None and str(equiv).strip().lower() == "refresh":
            return meta
    return None


def find_meta_refresh(html: Markup) -> Tuple[bool, Optional[str]]:
    """Return `(detected, target)` for a meta refresh redirect in `html`.

    Only the first refresh tag is honored; a tag whose `content` does not carry
    a `url=` part is not a redirect.
    """
    tag = _find_meta_refresh_tag(_soup(html))
    if tag is None:
        return False, None

    content = str(tag.get("content") or "").strip()
    m = META_REFRESH_CONTENT_RE.match(content)
    if not m:
        return False, None
    return True, m.group(2)


def extract_page_title(html: Markup) -> Optional[str]:
    """Return the `og:title` of a page, falling back to `<title>`."""
    soup = _soup(html)
    og = soup.find("meta", attrs={"property": "og:title"}) or soup.find(
        "meta", attrs={"name": "og:title"}
    )
    if og is not None and (og.get("content") or "").strip():
        return str(og.get("content")).strip()
    if soup.title is not None:
        title = soup.title.get_text(strip=True)
        if title:
            return title
    return None


def extract_meta_content(html: Markup, *keys: str) -> str:
    """Return the first non-empty `<meta property|name=key content=...>`."""
    soup = _soup(html)
    for key in keys:
        tag = soup.find("meta", attrs={"property": key}) or soup.find(
            "meta", attrs={"name": key}
        )
        if tag is not None and (tag.get("content") or "").strip():
            return str(tag.get("content")).strip()
    return ""
