"""
Translation Memory Import/Export Module

Reads the vendor's TMX 1.4b export into per-locale indexes and writes
indexes back out in the same dialect.

Vendor dialect:
- ``<prop type="x-smartling-string-variant">`` holds the variant path
- ``<prop type="x-smartling-plural-form">`` (optional) names the plural form
- inline ``<ph>``/``<bpt>``/``<ept>`` content is flattened into the text
"""

import logging
import xml.etree.ElementTree as ET
from datetime import datetime, timezone
from typing import Dict, List, Optional, Tuple, Union

from .config import TMSettings, get_settings
from .exceptions import CorpusLoadError, MalformedPathError
from .models import LocaleIndex, TranslationUnit
from .paths import VariantPathCodec

logger = logging.getLogger(__name__)

XML_LANG = "{http://www.w3.org/XML/1998/namespace}lang"


def _tuv_lang(tuv: ET.Element) -> Optional[str]:
    # TMX 1.1 used a plain "lang" attribute
    return tuv.get(XML_LANG) or tuv.get("lang")


def _seg_text(tuv: ET.Element) -> Optional[str]:
    seg = tuv.find("seg")
    if seg is None:
        return None
    return "".join(seg.itertext())


def _same_lang(lang: str, other: str) -> bool:
    return lang.lower() == other.lower()


def _same_primary_lang(lang: str, other: str) -> bool:
    return lang.lower().split("-")[0] == other.lower().split("-")[0]


class TmxIndexBuilder:
    """
    Parse a TMX export into LocaleIndex objects.

    Usage:
        builder = TmxIndexBuilder()
        indexes = builder.build(raw_tmx)            # {locale: LocaleIndex}
        index = builder.load(raw_tmx, "de-DE")      # one locale
    """

    def __init__(
        self,
        settings: Optional[TMSettings] = None,
        codec: Optional[VariantPathCodec] = None,
    ):
        self.settings = settings or get_settings()
        self.codec = codec or VariantPathCodec()

    def build(
        self,
        content: Union[str, bytes],
        locale: Optional[str] = None,
    ) -> Dict[str, LocaleIndex]:
        """
        Parse a TMX document.

        Args:
            content: TMX XML string or bytes
            locale: Target locale for every unit; when omitted each target
                tuv's xml:lang is used

        Returns:
            Dict of locale -> LocaleIndex, one per locale found

        Raises:
            CorpusLoadError: document is not parseable TMX
        """
        body, source_lang = self._parse_document(content)

        units: Dict[str, List[TranslationUnit]] = {}
        if locale is not None:
            units[locale] = []

        skipped = 0
        for position, tu in enumerate(body.findall("tu"), start=1):
            parsed = self._parse_unit(tu, position, source_lang, locale)
            if not parsed:
                skipped += 1
                continue
            for unit_locale, unit in parsed:
                units.setdefault(unit_locale, []).append(unit)

        indexes = {
            unit_locale: LocaleIndex.from_units(unit_locale, locale_units)
            for unit_locale, locale_units in units.items()
        }

        total = sum(index.unit_count for index in indexes.values())
        logger.info(
            f"Parsed {total} units for {len(indexes)} locale(s) from TMX"
            + (f" ({skipped} skipped)" if skipped else "")
        )
        return indexes

    def load(self, content: Union[str, bytes], locale: str) -> LocaleIndex:
        """Parse a single-locale export (convenience for one file per locale)."""
        return self.build(content, locale=locale)[locale]

    # ==================== PARSING ====================

    def _parse_document(self, content: Union[str, bytes]) -> Tuple[ET.Element, str]:
        if content is None or not content.strip():
            raise CorpusLoadError("Empty TMX document")

        try:
            root = ET.fromstring(content)
        except ET.ParseError as e:
            logger.error(f"TMX parse error: {e}")
            raise CorpusLoadError(f"Invalid TMX format: {e}", cause=e) from e

        if root.tag != "tmx":
            raise CorpusLoadError(f"Invalid TMX format: root element is <{root.tag}>, expected <tmx>")

        body = root.find("body")
        if body is None:
            raise CorpusLoadError("Invalid TMX format: missing <body>")

        source_lang = self.settings.source_locale
        header = root.find("header")
        if header is not None and header.get("srclang") and header.get("srclang") != "*all*":
            source_lang = header.get("srclang")

        return body, source_lang

    def _parse_unit(
        self,
        tu: ET.Element,
        position: int,
        source_lang: str,
        locale: Optional[str],
    ) -> List[Tuple[str, TranslationUnit]]:
        tuid = tu.get("tuid") or str(position)

        variant = None
        plural_form = None
        for prop in tu.findall("prop"):
            prop_type = prop.get("type")
            if prop_type == self.settings.variant_prop_type:
                variant = (prop.text or "").strip()
            elif prop_type == self.settings.plural_prop_type and prop.text:
                plural_form = prop.text.strip()

        if not variant:
            logger.warning(f"Skipping unit {tuid}: no {self.settings.variant_prop_type} prop")
            return []

        try:
            _, meta_key = self.codec.decode(variant)
        except MalformedPathError as e:
            logger.warning(f"Skipping unit {tuid}: {e}")
            return []

        source_tuv, target_tuvs = self._split_tuvs(tu.findall("tuv"), source_lang)
        source_text = _seg_text(source_tuv) if source_tuv is not None else None
        if source_text is None:
            logger.warning(f"Skipping unit {tuid} ({meta_key}): no {source_lang} segment")
            return []

        parsed = []
        for tuv in target_tuvs:
            target_text = _seg_text(tuv)
            if not target_text:
                logger.debug(f"Unit {tuid} ({meta_key}) has an empty {_tuv_lang(tuv)} segment")
                continue
            unit = TranslationUnit(
                source_text=source_text,
                target_text=target_text,
                meta_key=meta_key,
                plural_form=plural_form,
                tuid=tuid,
            )
            parsed.append((locale or _tuv_lang(tuv), unit))

        if not parsed:
            logger.warning(f"Skipping unit {tuid} ({meta_key}): no target segment")
        return parsed

    @staticmethod
    def _split_tuvs(
        tuvs: List[ET.Element],
        source_lang: str,
    ) -> Tuple[Optional[ET.Element], List[ET.Element]]:
        """Pick the source tuv (exact language first, then primary subtag)."""
        tuvs = [tuv for tuv in tuvs if _tuv_lang(tuv)]

        for matches in (_same_lang, _same_primary_lang):
            for tuv in tuvs:
                if matches(_tuv_lang(tuv), source_lang):
                    return tuv, [other for other in tuvs if other is not tuv]

        return None, tuvs


class TMXExporter:
    """Export locale indexes to the vendor TMX dialect"""

    def __init__(
        self,
        settings: Optional[TMSettings] = None,
        codec: Optional[VariantPathCodec] = None,
    ):
        self.settings = settings or get_settings()
        self.codec = codec or VariantPathCodec()

    def to_tmx(
        self,
        indexes: Dict[str, LocaleIndex],
        source_lang: Optional[str] = None,
        created_by: str = "tm-engine",
        creation_date: Optional[datetime] = None,
    ) -> str:
        """
        Export indexes to TMX 1.4b.

        Args:
            indexes: locale -> LocaleIndex
            source_lang: Source language code (defaults to settings)
            created_by: Creator attribution
            creation_date: Header timestamp (defaults to now)

        Returns:
            TMX XML string
        """
        source_lang = source_lang or self.settings.source_locale
        creation_date = creation_date or datetime.now(timezone.utc)

        # Create TMX root
        root = ET.Element("tmx", version="1.4")

        # Header
        header = ET.SubElement(root, "header")
        header.set("creationtool", "tm-engine")
        header.set("creationtoolversion", "1.0")
        header.set("datatype", "plaintext")
        header.set("segtype", "block")
        header.set("adminlang", source_lang)
        header.set("srclang", source_lang)
        header.set("o-tmf", "tm-engine")
        header.set("creationdate", creation_date.strftime("%Y%m%dT%H%M%SZ"))
        header.set("creationid", created_by)

        # Body with translation units
        body = ET.SubElement(root, "body")

        counter = 0
        for locale in sorted(indexes):
            for unit in indexes[locale].units():
                counter += 1
                tu = ET.SubElement(body, "tu")
                tu.set("tuid", unit.tuid or str(counter))

                prop = ET.SubElement(tu, "prop", type=self.settings.variant_prop_type)
                prop.text = self.codec.encode(source_lang, unit.meta_key)

                if unit.plural_form:
                    prop = ET.SubElement(tu, "prop", type=self.settings.plural_prop_type)
                    prop.text = unit.plural_form

                # Source segment
                tuv_source = ET.SubElement(tu, "tuv")
                tuv_source.set(XML_LANG, source_lang)
                seg_source = ET.SubElement(tuv_source, "seg")
                seg_source.text = unit.source_text

                # Target segment
                tuv_target = ET.SubElement(tu, "tuv")
                tuv_target.set(XML_LANG, locale)
                seg_target = ET.SubElement(tuv_target, "seg")
                seg_target.text = unit.target_text

        # Convert to string with proper declaration
        xml_str = ET.tostring(root, encoding="unicode", method="xml")
        return f'<?xml version="1.0" encoding="UTF-8"?>\n{xml_str}'


# ==================== CONVENIENCE FUNCTIONS ====================

def load_tmx(content: Union[str, bytes], locale: Optional[str] = None) -> Dict[str, LocaleIndex]:
    """Parse TMX into locale indexes (convenience function)"""
    return TmxIndexBuilder().build(content, locale=locale)


def export_tmx(indexes: Dict[str, LocaleIndex], source_lang: Optional[str] = None) -> str:
    """Export locale indexes to TMX (convenience function)"""
    return TMXExporter().to_tmx(indexes, source_lang)
