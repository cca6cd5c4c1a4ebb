"""
Live preview compilation - one self-contained document from HTML + CSS.

The stylesheet is inlined so the sandboxed preview frame needs no second
request for styles.css.
"""

import logging
import re

logger = logging.getLogger("dsy.services.preview")

_STYLESHEET_LINK_RE = re.compile(
    r"<link\b[^>]*href=[\"'][^\"']*styles\.css[^\"']*[\"'][^>]*>\s*",
    re.IGNORECASE,
)
_HEAD_CLOSE_RE = re.compile(r"</head\s*>", re.IGNORECASE)
_BODY_OPEN_RE = re.compile(r"<body\b", re.IGNORECASE)
_HTML_OPEN_RE = re.compile(r"<html\b[^>]*>", re.IGNORECASE)

PREVIEW_TITLE = "DSY Core Preview"
PREVIEW_FONTS_URL = (
    "https://fonts.googleapis.com/css2?family=Inter:wght@300;400;500;600;700"
    "&family=Outfit:wght@300;400;500;600;700&display=swap"
)
# Base rules placed before the user stylesheet in wrapped fragments
PREVIEW_RESET_RULES = (
    "* { margin: 0; padding: 0; box-sizing: border-box; }",
    "body { font-family: 'Inter', sans-serif; }",
)


def compile_live_preview(html: str, css: str = "") -> str:
    """
    Inline `css` into `html`.

    Full documents get a <style> tag before </head> (or before <body> when
    there is no head) and lose their link to styles.css. Fragments are
    wrapped in a preview document with a title, the Inter/Outfit fonts and
    a box-model reset ahead of `css`.
    """
    html = html or ""
    css = css or ""
    lowered = html.lower()

    if "<!doctype" not in lowered and "<html" not in lowered:
        return (
            "<!DOCTYPE html>\n"
            '<html lang="en">\n'
            "<head>\n"
            '  <meta charset="UTF-8">\n'
            '  <meta name="viewport" content="width=device-width, initial-scale=1.0">\n'
            f"  <title>{PREVIEW_TITLE}</title>\n"
            f"  <link href=\"{PREVIEW_FONTS_URL}\" rel=\"stylesheet\">\n"
            "  <style>\n"
            + "".join(f"    {rule}\n" for rule in PREVIEW_RESET_RULES)
            + f"    {css}\n"
            "  </style>\n"
            "</head>\n"
            "<body>\n"
            f"  {html}\n"
            "</body>\n"
            "</html>"
        )

    if not css:
        return html

    document = _STYLESHEET_LINK_RE.sub("", html)
    style = f"<style>\n{css}\n</style>\n"

    head_close = _HEAD_CLOSE_RE.search(document)
    if head_close:
        index = head_close.start()
    else:
        body_open = _BODY_OPEN_RE.search(document)
        if body_open:
            index = body_open.start()
            style = f"<head>{style}</head>\n"
        else:
            html_open = _HTML_OPEN_RE.search(document)
            index = html_open.end() if html_open else 0

    logger.debug(f"Compiled preview: {len(html)} chars HTML, {len(css)} chars CSS")
    return document[:index] + style + document[index:]
