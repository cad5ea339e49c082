"""HTML translation driven by ``i18n`` marker attributes.

Marker vocabulary understood by ``MarkupTranslator``:

- ``i18n``            translate the element's content
- ``i18n-<attr>``     translate attribute ``<attr>`` of this element
- ``no-i18n``         do not translate content anywhere below this element
- ``no-i18n-<attr>``  keep ``<attr>`` as is although it is translated automatically

Markers never reach the output, whether or not anything was translated.
"""

from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from bs4 import BeautifulSoup, Doctype, NavigableString, Tag
from bs4.formatter import HTMLFormatter

from .catalog import Catalog
from .codec import encode_attribute, normalize_attribute, normalize_text
from .exceptions import MissingTranslation

logger = logging.getLogger(__name__)

CONTENT_MARKER = "i18n"
EXCLUDE_MARKER = "no-i18n"
OPT_IN_PREFIX = "i18n-"
VETO_PREFIX = "no-i18n-"
MARKER_PREFIXES = (CONTENT_MARKER, EXCLUDE_MARKER)

PARSER = "html.parser"


# ── Serialization ─────────────────────────────────────────────────────────────
# Character references are hidden from the parser behind this private-use
# character and put back after serialization, so untouched text and attribute
# values keep their source spelling (&copy; stays &copy;, &quot; stays &quot;).
AMP = "\ue000"


def protect_references(text: str) -> str:
	return text.replace("&", AMP)


def restore_references(text: str) -> str:
	return text.replace(AMP, "&")


class SourceDoctype(Doctype):
	SUFFIX = ">"


class SourceOrderFormatter(HTMLFormatter):
	"""HTML formatter that writes the tree back as close to its source as possible.

	- no entity substitution: references are protected, everything else is source text
	- attributes keep their source order instead of being sorted
	- void elements are written as ``<input>`` rather than ``<input/>``
	- empty attributes are written as bare names (``<input disabled>``)
	"""

	def __init__(self):
		super().__init__(
			entity_substitution=None,
			void_element_close_prefix=None,
			empty_attributes_are_booleans=True,
		)

	def attributes(self, tag):
		if tag.attrs is None:
			return []
		return [
			(k, None if self.empty_attributes_are_booleans and v == "" else v)
			for k, v in tag.attrs.items()
		]


FORMATTER = SourceOrderFormatter()


def parse_html(text: str) -> BeautifulSoup:
	"""Parse already protected text.

	class/rel/... stay plain strings so their spacing survives serialization.
	"""
	return BeautifulSoup(
		text,
		PARSER,
		multi_valued_attributes=None,
		element_classes={Doctype: SourceDoctype},
	)


def render(node) -> str:
	return restore_references(node.decode(formatter=FORMATTER))


def inner_html(element: Tag) -> str:
	return restore_references(element.decode_contents(formatter=FORMATTER))


def parse_fragment(text: str) -> List:
	text = protect_references(text)
	if "<" not in text:
		return [NavigableString(text)]
	fragment = parse_html(text)
	return [node.extract() for node in list(fragment.contents)]


def strip_markers(element: Tag) -> None:
	for name in [a for a in element.attrs if a.startswith(MARKER_PREFIXES)]:
		del element[name]


def strip_subtree_markers(node) -> None:
	if isinstance(node, Tag):
		strip_markers(node)
		for element in node.find_all(True):
			strip_markers(element)


def strip_all_markers(text: str) -> str:
	soup = parse_html(protect_references(text))
	strip_subtree_markers(soup)
	return render(soup)


# ── Translation ───────────────────────────────────────────────────────────────
class MarkupTranslator:
	def __init__(
		self,
		catalog: Optional[Catalog],
		attributes: Iterable[str] = (),
		translated_tags: Iterable[str] = (),
		throw_on_missing: bool = True,
	):
		self.catalog = catalog
		self.attributes = tuple(a.lower() for a in attributes)
		self.translated_tags = frozenset(t.lower() for t in translated_tags)
		self.throw_on_missing = throw_on_missing

	def translate(self, text: str, file_path=None) -> str:
		if self.catalog is None:
			# Nothing to translate with: only remove the markers.
			return strip_all_markers(text)
		soup = parse_html(protect_references(text))
		self._visit_children(soup, False, file_path)
		return render(soup)

	def _visit_children(self, parent: Tag, excluded: bool, file_path) -> None:
		for child in list(parent.children):
			if isinstance(child, Tag):
				self._visit(child, excluded, file_path)

	def _visit(self, element: Tag, excluded: bool, file_path) -> None:
		excludes_subtree = excluded or element.has_attr(EXCLUDE_MARKER)
		if excluded:
			strip_markers(element)
			replaced = False
		else:
			replaced = self._translate_element(element, file_path)
		# Translated content comes from the catalog, not from the document.
		if not replaced:
			self._visit_children(element, excludes_subtree, file_path)

	def _translate_element(self, element: Tag, file_path) -> bool:
		replaced = False
		if self._wants_content(element):
			replaced = self._translate_content(element, file_path)
		for name in self.attributes_to_translate(element):
			self._translate_attribute(element, name, file_path)
		strip_markers(element)
		return replaced

	def _wants_content(self, element: Tag) -> bool:
		if element.has_attr(EXCLUDE_MARKER):
			return False
		return element.has_attr(CONTENT_MARKER) or element.name in self.translated_tags

	def attributes_to_translate(self, element: Tag) -> List[str]:
		"""Names of the element's attributes to translate, in the order they are handled.

		1. configured automatic attributes, unless vetoed by ``no-i18n-<attr>``
		2. attributes opted in by ``i18n-<attr>`` that are not automatic already
		"""
		attrs = element.attrs
		names = [name for name in self.attributes if name in attrs and VETO_PREFIX + name not in attrs]
		for marker in attrs:
			if not marker.startswith(OPT_IN_PREFIX):
				continue
			name = marker[len(OPT_IN_PREFIX):]
			if name in attrs and name not in self.attributes and name not in names:
				names.append(name)
		return names

	def _translate_content(self, element: Tag, file_path) -> bool:
		key = normalize_text(inner_html(element))
		if not key:
			# valid state, e.g. <input> has no content
			return False
		translated = self._lookup(key, file_path)
		if translated is None:
			return False
		element.clear()
		for node in parse_fragment(translated):
			element.append(node)
			# catalog markup may carry markers of its own
			strip_subtree_markers(node)
		return True

	def _translate_attribute(self, element: Tag, name: str, file_path) -> None:
		key = normalize_attribute(restore_references(element[name]))
		if not key:
			return
		translated = self._lookup(key, file_path)
		if translated is not None:
			element[name] = protect_references(encode_attribute(translated))

	def _lookup(self, key: str, file_path) -> Optional[str]:
		translated = self.catalog.lookup(key)
		if translated is None:
			if self.throw_on_missing:
				raise MissingTranslation(self.catalog.origin, file_path, key)
			logger.debug("No translation for %r in %s", key, file_path)
		return translated
