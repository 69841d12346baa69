"""
Tests for the HTML sanitizing pipeline.
"""

from synergie_mail.services.sanitizer import (
    FALLBACK_TEXT,
    apply_fallback,
    block_tags_to_newlines,
    clean_text,
    collapse_whitespace,
    decode_entities,
    extract_images,
    html_to_text,
    remove_control_chars,
    sanitize,
    strip_blocks,
    strip_inline_styles,
    strip_mime_artifacts,
    summarize,
)


class TestPipelineSteps:
    """Each step is a pure function, tested on its own."""

    def test_strip_blocks(self):
        html = (
            "<head><title>x</title></head><style>p{color:red}</style>"
            "<script>alert(1)</script><link rel='x'><meta charset='utf-8'><p>Texte</p>"
        )
        assert strip_blocks(html) == "<p>Texte</p>"

    def test_strip_inline_styles(self):
        html = """<p style="color:red">A</p><div style='margin:0'>B</div>"""
        assert strip_inline_styles(html) == "<p>A</p><div>B</div>"

    def test_strip_mime_artifacts(self):
        raw = (
            "Content-Type: text/html; charset=utf-8\n"
            "Content-Transfer-Encoding: quoted-printable\n"
            "--000000000000ca7d5063ab3a1ed\n"
            "Bonjour"
        )
        assert strip_mime_artifacts(raw).strip() == "Bonjour"

    def test_block_tags_to_newlines(self):
        html = "a<br>b</p>c</div>d<td>e</td><a href='x'>lien</a>"
        assert block_tags_to_newlines(html) == "a\nb\nc\nd<td>e lien"

    def test_decode_entities(self):
        assert decode_entities("&lt;b&gt; &amp; &quot;x&quot; &eacute; &#233;") == '<b> & "x" é é'

    def test_remove_control_chars_keeps_newlines(self):
        assert remove_control_chars("a\x00b\x07\nc│d|e") == "ab\ncde"

    def test_collapse_whitespace(self):
        text = "  un   deux\t\ttrois  \n\n\n\nquatre  "
        assert collapse_whitespace(text) == "un deux trois\n\nquatre"


class TestExtractImages:
    """Tests for image extraction on raw content."""

    def test_img_and_background_in_order(self):
        html = (
            '<div style="background-image: url(\'https://cdn.example.com/bg.png\')"></div>'
            '<img src="https://cdn.example.com/logo.png">'
        )
        assert extract_images(html) == [
            "https://cdn.example.com/bg.png",
            "https://cdn.example.com/logo.png",
        ]

    def test_filters_and_deduplicates(self):
        html = (
            '<img src="cid:image001"><img src="https://a.fr/1.png">'
            '<img src="data:image/png;base64,AAAA"><img src="https://a.fr/1.png">'
        )
        assert extract_images(html) == ["https://a.fr/1.png", "data:image/png;base64,AAAA"]

    def test_empty(self):
        assert extract_images("") == []


class TestFallback:
    """Tests for the fallback policy."""

    def test_short_text(self):
        assert apply_fallback("court") == FALLBACK_TEXT

    def test_bare_hex(self):
        assert apply_fallback("000000000000ca7d5063ab3a1ed") == FALLBACK_TEXT

    def test_custom_fallback(self):
        assert apply_fallback("", "Autre") == "Autre"

    def test_real_text_kept(self):
        assert apply_fallback("Bonjour tout le monde") == "Bonjour tout le monde"


class TestSanitize:
    """End-to-end pipeline."""

    def test_danger_classes_removed(self):
        raw = (
            "<html><head><style>body{margin:0}</style></head><body>"
            "<script>alert('x')</script>"
            '<p style="font-size:20px">Bonjour Marie,</p>'
            "<p>Votre dossier est validé.</p></body></html>"
        )
        result = sanitize(raw)
        for marker in ("<style", "<script", 'style="'):
            assert marker not in result.text
        assert result.text == "Bonjour Marie,\nVotre dossier est validé."

    def test_html_source_newlines_not_significant(self):
        raw = "<div>\n  Bonjour\n  Marie\n</div><div>Suite du message</div>"
        assert clean_text(raw) == "Bonjour Marie\nSuite du message"

    def test_plain_text_keeps_lines(self):
        raw = "Bonjour,\n\n\n\nMerci pour votre retour.\nCordialement"
        assert clean_text(raw) == "Bonjour,\n\nMerci pour votre retour.\nCordialement"

    def test_empty_input_uses_fallback(self):
        result = sanitize("")
        assert result.text == FALLBACK_TEXT
        assert result.cleaned_text == ""
        assert result.used_fallback is True
        assert result.images == []

    def test_html_to_text(self):
        assert html_to_text("<p>Rendez-vous &agrave; 10h</p>") == "Rendez-vous à 10h"


class TestSummarize:
    """Tests for the textContent summary."""

    def test_short_text_unchanged(self):
        assert summarize("abc") == "abc"

    def test_exact_limit_unchanged(self):
        assert summarize("x" * 300) == "x" * 300

    def test_long_text_truncated(self):
        assert summarize("x" * 301) == "x" * 300 + "..."
