"""
Tests for automated-sender detection and static fragments.
"""

import pytest

from synergie_mail.services.classifier import (
    ClassifierRule,
    ContentClassifier,
    SenderFamily,
)
from synergie_mail.services.email_renderer import EmailRenderer
from synergie_mail.services.sanitizer import FALLBACK_TEXT

HOSTINGER_RAW = "<p>Hostinger</p><p>Get started with business email</p>"


class TestDetection:
    """Tests for the sender family markers."""

    def test_hostinger_detected(self):
        classifier = ContentClassifier()
        assert classifier.system_family(HOSTINGER_RAW) == "hostinger"

    def test_provider_name_alone_is_not_enough(self):
        classifier = ContentClassifier()
        assert classifier.system_family("Votre facture Hostinger") is None

    def test_fallback_text_per_family(self):
        classifier = ContentClassifier()
        assert classifier.fallback_text(HOSTINGER_RAW) == "Email de configuration Hostinger reçu"
        assert classifier.fallback_text("Bonjour") == FALLBACK_TEXT


class TestRules:
    """Tests for the ordered rule table."""

    def test_technical_content_gives_setup_fragment(self):
        classifier = ContentClassifier()
        result = classifier.classify(HOSTINGER_RAW, "margin: 0; padding: 0")
        assert result.rule == "hostinger-setup"
        assert result.fragment == "hostinger_setup"

    def test_short_content_gives_setup_fragment(self):
        classifier = ContentClassifier()
        assert classifier.classify(HOSTINGER_RAW, "Hi").rule == "hostinger-setup"

    def test_readable_content_gives_welcome_fragment(self):
        classifier = ContentClassifier()
        cleaned = "Welcome aboard! Get started with business email in a few simple steps today."
        result = classifier.classify(HOSTINGER_RAW, cleaned)
        assert result.rule == "hostinger-welcome"
        assert result.fragment == "hostinger_welcome"

    def test_no_rule_matches(self):
        classifier = ContentClassifier()
        cleaned = "Votre facture mensuelle est disponible dans votre espace client en ligne."
        assert classifier.classify(HOSTINGER_RAW, cleaned) is None

    def test_regular_email_not_classified(self):
        classifier = ContentClassifier()
        assert classifier.classify("Bonjour Marie", "Bonjour Marie") is None

    def test_custom_family_and_rule(self):
        family = SenderFamily("free", lambda raw: "Free Pro" in raw, "Notification Free reçue")
        rule = ClassifierRule("free-any", "free", lambda raw, cleaned: True, "free_notice")
        classifier = ContentClassifier(families=[family], rules=[rule])

        result = classifier.classify("Message Free Pro", "texte")
        assert result.family == "free"
        assert result.fragment == "free_notice"

    def test_rule_with_unknown_family_rejected(self):
        rule = ClassifierRule("orphan", "inconnue", lambda raw, cleaned: True, "x")
        with pytest.raises(ValueError):
            ContentClassifier(rules=[rule])


class TestFragments:
    """The shipped fragments render without variables."""

    def test_setup_fragment_contains_server_settings(self):
        html = EmailRenderer().render_fragment("hostinger_setup")
        assert "imap.hostinger.com" in html
        assert "993" in html
        assert "smtp.hostinger.com" in html

    def test_welcome_fragment_has_three_steps(self):
        html = EmailRenderer().render_fragment("hostinger_welcome")
        assert html.count("<li") == 3

    def test_email_view_escapes_body(self):
        html = EmailRenderer().render_email_view("<b>Bonjour</b> & bienvenue")
        assert "&lt;b&gt;Bonjour&lt;/b&gt; &amp; bienvenue" in html
        assert "📧 Email reçu" in html
        assert "white-space: pre-line" in html
