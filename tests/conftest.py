"""
Shared Test Fixtures

TMX documents in the vendor dialect, built from small unit descriptions.
"""

from xml.sax.saxutils import escape

import pytest

from tm_engine.config import TMSettings
from tm_engine.io import TmxIndexBuilder
from tm_engine.memory import TranslationMemory

LOCALE = "de-DE"
SOURCE_LANG = "en-US"


# ============================================================
# Helper Functions
# ============================================================

def unit_xml(
    variant: str,
    source: str,
    target: str,
    plural_form: str = None,
    target_lang: str = LOCALE,
    tuid: str = None,
    escaped: bool = False,
) -> str:
    """One <tu>; pass escaped=True when source/target already contain inline XML."""
    if not escaped:
        source, target = escape(source), escape(target)

    props = f'<prop type="x-smartling-string-variant">{escape(variant)}</prop>'
    if plural_form:
        props += f'<prop type="x-smartling-plural-form">{plural_form}</prop>'

    tuid_attr = f' tuid="{tuid}"' if tuid else ""
    return (
        f"<tu{tuid_attr}>{props}"
        f'<tuv xml:lang="{SOURCE_LANG}"><seg>{source}</seg></tuv>'
        f'<tuv xml:lang="{target_lang}"><seg>{target}</seg></tuv>'
        f"</tu>"
    )


def tmx_xml(*units: str, srclang: str = SOURCE_LANG) -> str:
    """Wrap <tu> strings in a TMX document."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<tmx version="1.4">'
        f'<header creationtool="Smartling" srclang="{srclang}" datatype="plaintext" '
        'segtype="block" adminlang="en-US" o-tmf="Smartling"/>'
        f'<body>{"".join(units)}</body>'
        "</tmx>"
    )


# ============================================================
# Fixtures
# ============================================================

@pytest.fixture
def settings():
    return TMSettings(repo_name="single_commit", _env_file=None)


@pytest.fixture
def builder(settings):
    return TmxIndexBuilder(settings)


@pytest.fixture
def make_unit():
    return unit_xml


@pytest.fixture
def make_tmx():
    return tmx_xml


@pytest.fixture
def make_memory(builder, settings):
    """Build a TranslationMemory for LOCALE from <tu> strings."""
    def _make(*units: str) -> TranslationMemory:
        index = builder.load(tmx_xml(*units), LOCALE)
        return TranslationMemory({LOCALE: index}, settings)
    return _make


@pytest.fixture
def plurals_tmx():
    return tmx_xml(
        unit_xml("en:#:teapot", "Smartling singular", "Smartling german singular", plural_form="one"),
        unit_xml("en:#:teapot", "Smartling plural", "Smartling german plural", plural_form="other"),
        unit_xml("en:#:teapot:#:one", "DIY singular", "DIY german singular"),
        unit_xml("en:#:teapot:#:other", "DIY plural", "DIY german plural"),
    )


@pytest.fixture
def duplicate_meta_keys_tmx():
    return tmx_xml(
        unit_xml("en:#:teapot", "first value", "first value german"),
        unit_xml("en:#:teapot", "second value", "second value german"),
    )


@pytest.fixture
def double_tmx():
    return tmx_xml(
        unit_xml("en:#:foo:#:bar", "foobar", "fussbar"),
        unit_xml("en:#:baz:#:[1]", "bazbaz", "bassbass"),
    )
