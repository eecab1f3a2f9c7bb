import pytest

from src.emails.render import get_localized_url, render_email


class TestEmailRender:
    def test_render_welcome_email_en(self):
        """Test rendering welcome email in English."""
        email_data = render_email(
            template_name="welcome",
            locale="en",
            first_name="Ada",
            roles=["organization_manager"],
            app_url="https://app.blocktrade.io/en/signin",
        )

        assert email_data["subject"] == "Welcome to BlockTrade"
        assert email_data["reply_to"] == "support@blocktrade.io"
        assert "Hi Ada," in email_data["html"]
        assert "<li>organization_manager</li>" in email_data["html"]
        assert 'href="https://app.blocktrade.io/en/signin"' in email_data["html"]

    @pytest.mark.parametrize(
        "locale,expected_subject",
        [
            ("en", "Welcome to BlockTrade"),
            ("es", "Bienvenido a BlockTrade"),
            ("fr", "Bienvenue sur BlockTrade"),
        ],
    )
    def test_render_welcome_email_all_locales(self, locale: str, expected_subject: str):
        """Test rendering welcome email in all supported locales."""
        email_data = render_email(template_name="welcome", locale=locale)

        assert email_data["subject"] == expected_subject
        assert email_data["html"]

    def test_render_welcome_email_without_roles_omits_list(self):
        email_data = render_email(template_name="welcome", locale="en", roles=[])

        assert "Roles granted" not in email_data["html"]
        assert "Hi," in email_data["html"]

    def test_render_escapes_user_supplied_values(self):
        email_data = render_email(
            template_name="welcome", locale="en", first_name="<script>x</script>"
        )

        assert "<script>" not in email_data["html"]
        assert "&lt;script&gt;" in email_data["html"]

    def test_unknown_locale_falls_back_to_english(self):
        email_data = render_email(template_name="welcome", locale="de")  # type: ignore[arg-type]

        assert email_data["subject"] == "Welcome to BlockTrade"


@pytest.mark.parametrize(
    "base_url,locale,path,expected",
    [
        ("https://app.blocktrade.io", "en", "signin", "https://app.blocktrade.io/en/signin"),
        ("https://app.blocktrade.io/", "fr", "signin", "https://app.blocktrade.io/fr/signin"),
        ("http://localhost:3000", "es", "onboarding", "http://localhost:3000/es/onboarding"),
    ],
)
def test_get_localized_url(base_url, locale, path, expected):
    assert get_localized_url(base_url, locale, path) == expected
