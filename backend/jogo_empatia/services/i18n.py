import json
import logging
from typing import Dict, Tuple

logger = logging.getLogger(__name__)

LANGUAGES = ('pt', 'en')
_SUFFIX = {'pt': 'PT', 'en': 'EN'}


class Localizer:
    """Kiosk text lookup keyed by (section, key, language).

    ``language.json`` stores each text as ``<key>PT`` / ``<key>EN`` inside a
    section object; the table is flattened once at load time.
    """

    def __init__(self, table: Dict[Tuple[str, str, str], str] = None, language: str = 'pt'):
        self.table = dict(table or {})
        self.language = language if language in LANGUAGES else 'pt'

    @classmethod
    def from_file(cls, path: str, language: str = 'pt') -> 'Localizer':
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except FileNotFoundError:
            logger.warning(f"[i18n] language file not found: {path}")
            return cls(language=language)
        except (OSError, ValueError) as exc:
            logger.error(f"[i18n] could not read {path}: {exc}")
            return cls(language=language)
        return cls.from_dict(data, language=language)

    @classmethod
    def from_dict(cls, data: dict, language: str = 'pt') -> 'Localizer':
        table = {}
        for section, entries in (data or {}).items():
            if not isinstance(entries, dict):
                continue
            for full_key, text in entries.items():
                for lang, suffix in _SUFFIX.items():
                    if full_key.endswith(suffix) and len(full_key) > len(suffix):
                        table[(section.lower(), full_key[:-len(suffix)], lang)] = '' if text is None else str(text)
                        break
        logger.info(f"[i18n] loaded {len(table)} entries")
        return cls(table, language=language)

    def set_language(self, language: str) -> None:
        if language not in LANGUAGES:
            raise ValueError(f"unsupported language: {language}")
        self.language = language

    def toggle_language(self) -> str:
        self.language = 'en' if self.language == 'pt' else 'pt'
        return self.language

    def get(self, section: str, key: str, *variables) -> str:
        text = self.table.get(((section or '').lower(), key, self.language), '')
        if text and variables:
            try:
                text = text.format(*variables)
            except (IndexError, KeyError, ValueError):
                logger.warning(f"[i18n] bad format variables for {section}.{key}: {variables}")
        return text

    def section(self, section: str) -> Dict[str, str]:
        name = (section or '').lower()
        return {k: v for (s, k, lang), v in self.table.items() if s == name and lang == self.language}
