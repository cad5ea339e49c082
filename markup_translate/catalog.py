from __future__ import annotations
import dataclasses
import logging
import os
import types
from typing import Iterable, Iterator, Mapping, Optional, Tuple

import polib

from .exceptions import CatalogLoadError

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class CatalogEntry:
	source: str
	translations: Tuple[str, ...] = ()

	@property
	def translation(self) -> str:
		return self.translations[0] if self.translations else ""


class Catalog:
	"""Read-only mapping from source text to translated text."""

	def __init__(self, messages: Mapping[str, str], origin=None):
		self._messages = types.MappingProxyType(dict(messages))
		self.origin = origin

	@classmethod
	def from_entries(cls, entries: Iterable[CatalogEntry], origin=None) -> "Catalog":
		messages = {}
		for entry in entries:
			# An empty first candidate means "not translated yet", not "translate to empty".
			if not entry.translation:
				continue
			# TODO: scope keys by the entry's origin file once entries carry it
			if entry.source in messages and messages[entry.source] != entry.translation:
				logger.debug("Duplicate catalog key %r in %s, keeping last translation", entry.source, origin)
			messages[entry.source] = entry.translation
		logger.debug("Loaded %d translations from %s", len(messages), origin)
		return cls(messages, origin=origin)

	def lookup(self, key: str) -> Optional[str]:
		return self._messages.get(key)

	def __contains__(self, key) -> bool:
		return key in self._messages

	def __len__(self) -> int:
		return len(self._messages)

	def __repr__(self) -> str:
		return f"<Catalog origin={self.origin!r} entries={len(self)}>"


def _candidates(entry: polib.POEntry) -> Tuple[str, ...]:
	if entry.msgid_plural:
		return tuple(entry.msgstr_plural[k] for k in sorted(entry.msgstr_plural))
	return (entry.msgstr,)


def iter_po_entries(path) -> Iterator[CatalogEntry]:
	"""Yield catalog entries from a gettext PO file, skipping obsolete ones."""
	# polib parses any string that is not an existing path as PO data
	if not os.path.isfile(path):
		raise CatalogLoadError(path, "no such file")
	try:
		po = polib.pofile(str(path), encoding="utf-8")
	except (OSError, ValueError) as e:
		raise CatalogLoadError(path, str(e)) from e
	for entry in po:
		if entry.obsolete:
			continue
		yield CatalogEntry(source=entry.msgid, translations=_candidates(entry))


def load_catalog(path) -> Catalog:
	return Catalog.from_entries(iter_po_entries(path), origin=path)
