"""Turn raw page markup into readable article text.

Every heuristic lives in a module-level rule table below; the functions
only apply them to a parsed document in order. Removing a false positive
means editing a table, not the control flow.
"""

import logging
import re

from bs4 import BeautifulSoup, Tag

logger = logging.getLogger(__name__)

# Elements that are never content; removed together with their contents.
REMOVE_TAGS: tuple[str, ...] = (
    "script",
    "style",
    "noscript",
    "iframe",
    "svg",
    "canvas",
    "video",
    "audio",
    "map",
    "object",
    "embed",
)

# Page chrome that is rarely main content.
REMOVE_STRUCTURAL: tuple[str, ...] = (
    "header",
    "footer",
    "nav",
    "aside",
    "menu",
    "menuitem",
)

# Class/id substrings marking non-content elements (case-insensitive).
NON_CONTENT_PATTERNS: tuple[str, ...] = (
    # navigation and layout
    "sidebar", "side-bar", "side_bar",
    "navbar", "nav-bar", "navigation",
    "menu", "breadcrumb",
    "header", "footer", "masthead",
    # ads and promotions
    "ad-", "ads-", "advert", "advertisement",
    "sponsor", "promoted", "promo",
    "banner", "adsense", "ad_",
    # overlays and engagement widgets
    "popup", "modal", "overlay", "lightbox",
    "cookie", "consent", "gdpr",
    "newsletter", "subscribe", "signup",
    "social", "share", "sharing",
    "comment", "disqus", "discuss",
    # rails
    "widget", "related", "recommended",
    "trending", "popular", "latest-posts",
    "author-bio", "about-author",
    "tag-cloud", "categories",
    # theme switchers
    "gfg", "theme", "dark-mode", "light-mode",
)

# Only these elements are removed by class/id pattern.
CONTAINER_TAGS: tuple[str, ...] = (
    "div", "section", "aside", "span", "p", "ul", "ol", "li", "article",
)

# Main-content containers in priority order, as CSS selectors.
MAIN_CONTAINER_SELECTORS: tuple[str, ...] = (
    "main",
    "article",
    "div.post-content, div.article-content, div.entry-content, div.main-content, "
    "div.page-content, div.content-body, div.post-body, div.article-body",
    "div#content, div#main, div#article, div#post, div#entry",
    "div.content",
)

MIN_CONTAINER_CHARS = 500

# Elements whose end starts a new line in the extracted text.
BLOCK_TAGS: tuple[str, ...] = (
    "p", "div", "section", "article", "h1", "h2", "h3", "h4", "h5", "h6", "li", "tr",
)

# CSS/JS fragments that leak into extracted text.
CSS_JS_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\{\s*[\w-]+\s*:\s*[^}]+\}"),
    re.compile(r"@font-face\s*\{", re.IGNORECASE),
    re.compile(r"@media\s*[(\[]", re.IGNORECASE),
    re.compile(r"@keyframes\s+\w+", re.IGNORECASE),
    re.compile(r"@import\s+", re.IGNORECASE),
    re.compile(r"\.[\w-]+\s*\{[^}]*\}"),
    re.compile(r"#[\w-]+\s*\{[^}]*\}"),
    re.compile(r"\bfunction\s*\([^)]*\)\s*\{"),
    re.compile(r"\bconst\s+\w+\s*=\s*\{"),
    re.compile(r"\blet\s+\w+\s*=\s*\{"),
    re.compile(r"\bvar\s+\w+\s*=\s*\{"),
    re.compile(r"=>\s*\{"),
    re.compile(r"document\.(?:querySelector|getElementById|getElementsBy)"),
    re.compile(r"window\.(?:addEventListener|location|innerWidth)"),
    re.compile(r"classList\.(?:add|remove|toggle)"),
    re.compile(r"addEventListener\s*\("),
    re.compile(r"Object\.freeze\s*\("),
    re.compile(r"export\s+(?:default\s+)?(?:function|class|const)"),
    re.compile(r"import\s+.*from\s+['\"]"),
)

SPECIAL_CHARS_RE = re.compile(r"[{}\[\]();:=<>/\\|&^%$#@!~`]")
MAX_LINE_SPECIAL_RATIO = 0.3
_SHORT_CODE_LINE_RE = re.compile(r"^[\w\s]*[{(=;]")

# Content validity: text shorter than this is not an article.
MIN_CONTENT_CHARS = 100
# Matches of these per 100 characters above MAX_CODE_RATIO reject the text.
CODE_INDICATORS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\{[\s\S]*\}"),
    re.compile(r"function\s*\("),
    re.compile(r"const\s+\w+\s*="),
    re.compile(r"\.\w+\s*\{"),
    re.compile(r"#\w+\s*\{"),
)
MAX_CODE_RATIO = 0.1

_HSPACE_RE = re.compile(r"[ \t\r\f\v\xa0]+")
_BLANK_LINES_RE = re.compile(r"\n\s*\n(?:\s*\n)*")


def parse_html(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


def _decompose_all(elements: list[Tag]) -> int:
    removed = 0
    for element in elements:
        # Descendants of an already removed match are gone with it
        if element.decomposed:
            continue
        element.decompose()
        removed += 1
    return removed


def remove_tags(soup: BeautifulSoup | Tag, tags: tuple[str, ...]) -> int:
    """Remove every element named in ``tags`` together with its contents.

    Returns:
        The number of removed elements.
    """
    return _decompose_all(soup.find_all(list(tags)))


def _matches_pattern(element: Tag, patterns: tuple[str, ...]) -> bool:
    if element.name not in CONTAINER_TAGS:
        return False
    classes = element.get("class") or []
    if isinstance(classes, str):
        classes = [classes]
    marker = " ".join([*classes, str(element.get("id") or "")]).lower()
    return bool(marker.strip()) and any(pattern in marker for pattern in patterns)


def remove_by_class_id_patterns(soup: BeautifulSoup | Tag, patterns: tuple[str, ...]) -> int:
    """Remove container elements whose class or id contains one of ``patterns``."""
    lowered = tuple(p.lower() for p in patterns)
    return _decompose_all(soup.find_all(lambda el: _matches_pattern(el, lowered)))


def find_main_container(soup: BeautifulSoup | Tag) -> Tag | None:
    """Return the first content container holding a substantial amount of markup."""
    for selector in MAIN_CONTAINER_SELECTORS:
        container = soup.select_one(selector)
        if container is not None and len(container.decode_contents()) > MIN_CONTAINER_CHARS:
            return container
    return None


def element_text(node: BeautifulSoup | Tag) -> str:
    """Text of ``node`` with block-level elements on their own lines.

    Mutates ``node``: line breaks are inserted after block elements.
    """
    for br in node.find_all("br"):
        br.replace_with("\n")
    for block in node.find_all(list(BLOCK_TAGS)):
        block.append("\n")
    return normalize_whitespace(node.get_text())


def strip_html_tags(html: str) -> str:
    """Strip markup to text; block-level elements end with a line break."""
    return element_text(parse_html(html))


def normalize_whitespace(text: str) -> str:
    """Collapse runs of spaces, trim lines and keep at most one blank line."""
    text = _HSPACE_RE.sub(" ", text)
    text = "\n".join(line.strip() for line in text.split("\n"))
    return _BLANK_LINES_RE.sub("\n\n", text).strip()


def special_char_ratio(text: str) -> float:
    if not text:
        return 0.0
    return len(SPECIAL_CHARS_RE.findall(text)) / len(text)


def _is_code_line(line: str) -> bool:
    if special_char_ratio(line) > MAX_LINE_SPECIAL_RATIO:
        return True
    return len(line) < 50 and bool(_SHORT_CODE_LINE_RE.match(line))


def remove_css_js_from_text(text: str) -> str:
    """Drop CSS/JS fragments and lines dense in code punctuation."""
    for pattern in CSS_JS_PATTERNS:
        text = pattern.sub(" ", text)
    lines = [
        line for line in text.split("\n") if not line.strip() or not _is_code_line(line.strip())
    ]
    return "\n".join(lines)


def clean_html_content(html: str) -> str:
    """Reduce raw page markup to the readable main text.

    Args:
        html: Full page markup.

    Returns:
        Plain text with paragraphs separated by line breaks.
    """
    soup = parse_html(html)
    remove_tags(soup, REMOVE_TAGS)
    remove_tags(soup, REMOVE_STRUCTURAL)
    removed = remove_by_class_id_patterns(soup, NON_CONTENT_PATTERNS)
    logger.debug("Removed %d non-content elements by class/id", removed)

    main = find_main_container(soup)
    root: BeautifulSoup | Tag = main if main is not None else (soup.body or soup)

    text = element_text(root)
    text = remove_css_js_from_text(text)
    text = normalize_whitespace(text)
    logger.debug("Cleaned %d chars of markup down to %d chars of text", len(html), len(text))
    return text


def is_valid_content(text: str | None) -> bool:
    """Whether extracted text looks like real prose rather than code or a stub."""
    if not text or len(text) < MIN_CONTENT_CHARS:
        return False

    code_matches = sum(len(pattern.findall(text)) for pattern in CODE_INDICATORS)
    code_ratio = code_matches / (len(text) / 100)
    if code_ratio > MAX_CODE_RATIO:
        logger.info("Content rejected: too much code (ratio: %.3f)", code_ratio)
        return False
    return True


# Run inside the page: strips chrome from a clone of <body> and returns the
# main container's text, or the whole cleaned body.
BROWSER_EXTRACTION_SCRIPT = """
(function() {
  const clone = document.body.cloneNode(true);
  const removeSelectors = [
    'script', 'style', 'noscript', 'iframe', 'svg', 'canvas',
    'header', 'footer', 'nav', 'aside', 'menu',
    '[class*="sidebar"]', '[class*="side-bar"]',
    '[class*="navbar"]', '[class*="nav-bar"]', '[class*="navigation"]',
    '[class*="ad-"]', '[class*="ads-"]', '[class*="advert"]',
    '[class*="cookie"]', '[class*="consent"]', '[class*="gdpr"]',
    '[class*="popup"]', '[class*="modal"]', '[class*="overlay"]',
    '[class*="newsletter"]', '[class*="subscribe"]',
    '[class*="social"]', '[class*="share"]',
    '[class*="comment"]', '[class*="disqus"]',
    '[class*="widget"]', '[class*="related"]',
    '[class*="footer"]', '[class*="header"]',
    '[id*="sidebar"]', '[id*="nav"]',
    '[id*="ad-"]', '[id*="ads-"]',
    '[id*="cookie"]', '[id*="popup"]',
    '[id*="footer"]', '[id*="header"]',
    '[role="navigation"]', '[role="banner"]', '[role="contentinfo"]',
    '[role="complementary"]', '[aria-hidden="true"]',
  ];
  removeSelectors.forEach(selector => {
    try { clone.querySelectorAll(selector).forEach(el => el.remove()); } catch (e) {}
  });
  const mainSelectors = [
    'main', 'article', '[role="main"]',
    '.post-content', '.article-content', '.entry-content',
    '.main-content', '.page-content', '.content-body',
    '#content', '#main', '#article',
  ];
  for (const selector of mainSelectors) {
    const main = clone.querySelector(selector);
    if (main && main.innerText.trim().length > 500) {
      return main.innerText.trim();
    }
  }
  return clone.innerText.trim();
})()
"""
