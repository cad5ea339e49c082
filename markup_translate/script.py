from __future__ import annotations
import logging
import re
from typing import Optional

from .catalog import Catalog
from .codec import encode_script_literal, normalize_text
from .exceptions import MissingTranslation

logger = logging.getLogger(__name__)

QUOTES = ("'", '"', "`")

# _( 'text' ) with escaped delimiters allowed inside the literal
CALL_TMPL = r"(?<![\w$])({name}\(\s*){q}([^{q}\\]*(?:\\.[^{q}\\]*)*){q}(\s*\))"


def call_pattern(call_name: str, quote: str) -> re.Pattern:
	return re.compile(CALL_TMPL.format(name=re.escape(call_name), q=re.escape(quote)), re.S)


class ScriptTranslator:
	"""Translates string literals passed to the i18n call (``_('Save')``) in script source.

	The scan is textual: one regular expression per quote style. Without a
	catalog the translator leaves scripts untouched.
	"""

	def __init__(self, catalog: Optional[Catalog], call_name: str = "_", throw_on_missing: bool = True):
		self.catalog = catalog
		self.call_name = call_name
		self.throw_on_missing = throw_on_missing
		self.patterns = [(q, call_pattern(call_name, q)) for q in QUOTES]

	def translate(self, text: str, file_path=None) -> str:
		if self.catalog is None:
			return text
		for quote, pattern in self.patterns:
			text = pattern.sub(lambda m, q=quote: self._replace(m, q, file_path), text)
		return text

	def _replace(self, m: re.Match, quote: str, file_path) -> str:
		opening, literal, closing = m.group(1), m.group(2), m.group(3)
		key = normalize_text(literal)
		if not key:
			return m.group(0)
		translated = self.catalog.lookup(key)
		if translated is None:
			if self.throw_on_missing:
				raise MissingTranslation(self.catalog.origin, file_path, key)
			logger.debug("No translation for %r in %s", key, file_path)
			return m.group(0)
		return f"{opening}{quote}{encode_script_literal(translated, quote)}{quote}{closing}"
