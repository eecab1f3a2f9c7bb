import importlib
from pathlib import Path
from typing import Literal, TypedDict

from jinja2 import Environment, FileSystemLoader, select_autoescape

TemplateType = Literal["welcome"]
LocaleType = Literal["en", "es", "fr"]

SUPPORTED_LOCALES: tuple[str, ...] = ("en", "es", "fr")


class EmailData(TypedDict):
    html: str
    subject: str
    reply_to: str


TEMPLATE_DIR = Path(__file__).parent / "template"

jinja_env = Environment(
    loader=FileSystemLoader(TEMPLATE_DIR),
    autoescape=select_autoescape(["html", "xml"]),
)


def get_localized_url(base_url: str, locale: str, path: str = "signin") -> str:
    """Generate localized URL for the BlockTrade app."""
    return f"{base_url.rstrip('/')}/{locale}/{path}"


def render_email(
    template_name: TemplateType,
    locale: LocaleType = "en",
    **context: object,
) -> EmailData:
    translations_module = importlib.import_module(
        f"src.emails.template.{template_name}.translations"
    )
    default_translations = translations_module.DEFAULT_TRANSLATIONS

    translations = default_translations.get(locale, default_translations["en"])

    template = jinja_env.get_template(f"{template_name}/{template_name}.html")

    html_content = template.render(translations=translations, **context)

    return EmailData(
        html=html_content,
        subject=translations["subject"],
        reply_to=translations.get("reply_to", "support@blocktrade.io"),
    )
