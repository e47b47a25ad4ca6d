"""Report rendering per output format."""
import io
from html import escape

from rich.console import Console
from rich.terminal_theme import DEFAULT_TERMINAL_THEME
from rich.text import Text

from k8slse.models import OutputFormat

HTML_HEADER = """<?xml version="1.0" encoding="UTF-8" ?>
<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" "http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">
<html xmlns="http://www.w3.org/1999/xhtml">
<head>
<meta http-equiv="Content-Type" content="application/xml+xhtml; charset=UTF-8"/>
<title>stdin</title>
</head>
<body style="color:white; background-color:black">
<pre>"""

HTML_FOOTER = """
</pre>
</body>
</html>"""


def ansi_to_html(raw: bytes) -> str:
    """
    Convert ANSI coloured terminal output to escaped HTML.

    Colours and text attributes become inline styled spans; everything
    else is HTML escaped. The text is not laid out on a console, so lines
    are never re-wrapped and tabs are kept as tabs.
    """
    text = Text.from_ansi(raw.decode("utf-8", errors="replace"))
    console = Console(file=io.StringIO(), force_terminal=True, color_system="truecolor")

    fragments = []
    for segment in text.render(console):
        chunk = escape(segment.text, quote=False)
        style = segment.style
        if style:
            css = style.get_html_style(DEFAULT_TERMINAL_THEME)
            if css:
                chunk = f'<span style="{css}">{chunk}</span>'
        fragments.append(chunk)
    return "".join(fragments)


def render_report(raw: bytes, output_format: OutputFormat) -> bytes:
    """Turn raw captured script output into report file content."""
    if OutputFormat(output_format) == OutputFormat.HTML:
        return (HTML_HEADER + ansi_to_html(raw) + HTML_FOOTER).encode("utf-8")
    return raw
