from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor

import pytest

from ishipped.markdown_processing import render_markdown


def test_headings() -> None:
    html = render_markdown("## Heading 2\n### Heading 3")
    assert "<h2>Heading 2</h2>" in html
    assert "<h3>Heading 3</h3>" in html


def test_h1_is_stripped_but_text_kept() -> None:
    html = render_markdown("# Heading 1")
    assert "<h1>" not in html
    assert "Heading 1" in html


def test_paragraph_and_emphasis() -> None:
    html = render_markdown("This is a paragraph with **bold** and *italic*.")
    assert "<p>" in html
    assert "<strong>bold</strong>" in html
    assert "<em>italic</em>" in html


def test_lists() -> None:
    html = render_markdown("- Item 1\n- Item 2\n\n1. First\n2. Second")
    assert "<ul>" in html
    assert "<li>Item 1</li>" in html
    assert "<ol>" in html
    assert "<li>Second</li>" in html


def test_code() -> None:
    html = render_markdown("Use `pip install`\n\n```\ncode here\n```")
    assert "<code>pip install</code>" in html
    assert "<pre>" in html
    assert "code here" in html


def test_code_language_class_is_kept() -> None:
    html = render_markdown("```python\nprint(1)\n```")
    assert '<code class="language-python">' in html


def test_blockquote_and_rule() -> None:
    html = render_markdown("> This is a quote\n\nAbove\n\n---\n\nBelow")
    assert "<blockquote>" in html
    assert "<hr>" in html


def test_table() -> None:
    html = render_markdown("| Col 1 | Col 2 |\n| --- | --- |\n| A | B |")
    assert "<table>" in html
    assert "<thead>" in html
    assert "<tbody>" in html
    assert "<th>Col 1</th>" in html
    assert "<td>A</td>" in html


def test_table_alignment_style_is_stripped() -> None:
    html = render_markdown("| A |\n| --: |\n| 1 |")
    assert "style" not in html


def test_strikethrough() -> None:
    assert "<del>deleted</del>" in render_markdown("~~deleted~~")


def test_links_open_in_new_tab() -> None:
    html = render_markdown("[Click here](https://example.com)")
    assert 'href="https://example.com"' in html
    assert 'target="_blank"' in html
    assert 'rel="noopener noreferrer"' in html


def test_link_title_kept() -> None:
    html = render_markdown('[x](https://example.com "Docs")')
    assert 'title="Docs"' in html


def test_autolink() -> None:
    html = render_markdown("Visit https://example.com/page now")
    assert '<a href="https://example.com/page"' in html
    assert 'target="_blank"' in html


def test_http_link_loses_href() -> None:
    html = render_markdown("[Bad link](http://example.com)")
    assert 'href="http://' not in html
    assert "Bad link" in html


@pytest.mark.parametrize(
    "md", ["[XSS](javascript:alert(1))", '[XSS](javascript:alert("xss"))']
)
def test_javascript_links(md: str) -> None:
    html = render_markdown(md)
    assert "javascript:" not in html
    assert "XSS" in html


@pytest.mark.parametrize(
    "src",
    [
        "https://raw.githubusercontent.com/user/repo/main/img.png",
        "https://i.imgur.com/abc123.png",
        "https://user-images.githubusercontent.com/123/456.png",
        "https://avatars.githubusercontent.com/u/123",
        "https://media.raw.githubusercontent.com/x.png",
    ],
)
def test_allowed_images(src: str) -> None:
    html = render_markdown(f"![Alt]({src})")
    assert "<img" in html
    assert f'src="{src}"' in html
    assert 'loading="lazy"' in html


@pytest.mark.parametrize(
    "md",
    [
        "![Alt](https://evil.com/malware.png)",
        "![Alt](https://raw.githubusercontent.com.evil.com/x.png)",
        "![Alt](./relative.png)",
    ],
)
def test_other_images_removed(md: str) -> None:
    html = render_markdown(md)
    assert "<img" not in html
    assert "evil.com" not in html


def test_http_image_removed() -> None:
    html = render_markdown("![Alt](http://raw.githubusercontent.com/user/repo/img.png)")
    assert 'src="http://' not in html
    assert "<img" not in html


def test_image_inside_link() -> None:
    html = render_markdown("[![shot](https://i.imgur.com/a.png)](https://example.com)")
    assert "<img" in html
    assert 'target="_blank"' in html


def test_script_tags() -> None:
    html = render_markdown("<script>alert('xss')</script>")
    assert "<script>" not in html
    assert "alert" not in html


def test_nested_script_attempt() -> None:
    html = render_markdown("<<script>script>alert('xss')<</script>/script>")
    assert "<script>" not in html


@pytest.mark.parametrize(
    "md, needle",
    [
        ("<div onclick=\"alert('xss')\">Click me</div>", "onclick"),
        ("<img src=\"x\" onerror=\"alert('xss')\">", "onerror"),
        ("<style>body { display: none; }</style>", "<style>"),
        ('<iframe src="https://evil.com"></iframe>', "<iframe"),
        ('<form action="https://evil.com"><input></form>', "<form"),
        ('<form action="https://evil.com"><input></form>', "<input"),
        ("<div>Content</div>", "<div>"),
        ("<button>Click</button>", "<button>"),
        ('<img src="data:image/svg+xml,<svg onload=alert(1)>">', "data:"),
        ("![x](data:image/png;base64,AAAA)", "data:"),
    ],
)
def test_raw_html_is_dropped(md: str, needle: str) -> None:
    assert needle not in render_markdown(md)


def test_inline_html_dropped_text_kept() -> None:
    html = render_markdown('Hello <span onclick="steal()">there</span>')
    assert "onclick" not in html
    assert "<span" not in html
    assert "there" in html


@pytest.mark.parametrize("md", ["", "   \n\n   "])
def test_empty_input(md: str) -> None:
    assert render_markdown(md) == ""


def test_long_input() -> None:
    assert "word" in render_markdown("word " * 10000)


def test_deeply_nested_quotes() -> None:
    html = render_markdown(">" * 5000 + " deep")
    assert html.startswith("<blockquote>")


def test_rendering_is_idempotent() -> None:
    md = "## Title\n\n[link](https://example.com) ![i](https://i.imgur.com/a.png)"
    assert render_markdown(md) == render_markdown(md)


def test_concurrent_renders() -> None:
    md = "## Title\n\n- [a](https://example.com)\n- ![i](https://i.imgur.com/a.png)"
    expected = render_markdown(md)
    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(render_markdown, [md] * 32))
    assert results == [expected] * 32
