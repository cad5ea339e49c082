from __future__ import annotations
import dataclasses
import logging
import pathlib
from typing import Iterable, Iterator, Optional, Tuple

from .catalog import Catalog, load_catalog
from .markup import MarkupTranslator
from .script import ScriptTranslator

logger = logging.getLogger(__name__)

MARKUP_KINDS = ("html", "htm")
SCRIPT_KINDS = ("js", "mjs")


@dataclasses.dataclass
class TranslatorConfig:
	po_path: Optional[pathlib.Path] = None  # None: strip markers only
	attributes: Tuple[str, ...] = ()
	translated_tags: Tuple[str, ...] = ()
	throw_on_missing: bool = True
	call_name: str = "_"
	encoding: str = "utf-8"


@dataclasses.dataclass
class TranslatableFile:
	path: pathlib.Path
	relative: str
	contents: bytes


def file_kind(relative: str) -> str:
	return pathlib.PurePath(relative).suffix.lstrip(".").lower()


class Translator:
	"""Routes source files to the markup or script translator by extension.

	The catalog is loaded once, when the translator is built, and only read
	afterwards; one ``Translator`` may serve several worker threads.
	"""

	def __init__(self, config: TranslatorConfig, catalog: Optional[Catalog] = None):
		self.config = config
		if catalog is None and config.po_path is not None:
			catalog = load_catalog(config.po_path)
		self.catalog = catalog
		self.markup = MarkupTranslator(
			catalog,
			attributes=config.attributes,
			translated_tags=config.translated_tags,
			throw_on_missing=config.throw_on_missing,
		)
		self.script = ScriptTranslator(
			catalog,
			call_name=config.call_name,
			throw_on_missing=config.throw_on_missing,
		)
		self.engines = {}
		for kind in MARKUP_KINDS:
			self.engines[kind] = self.markup
		for kind in SCRIPT_KINDS:
			self.engines[kind] = self.script

	@classmethod
	def from_catalog(cls, catalog: Optional[Catalog], **options) -> "Translator":
		return cls(TranslatorConfig(**options), catalog=catalog)

	def translate_text(self, kind: str, text: str, file_path=None) -> str:
		engine = self.engines.get(kind.lower())
		if engine is None:
			# unknown file type, do nothing
			return text
		logger.debug("Translating %s as %s", file_path, kind)
		return engine.translate(text, file_path=file_path)

	def translate_file(self, f: TranslatableFile) -> TranslatableFile:
		kind = file_kind(f.relative)
		if kind not in self.engines:
			return f
		text = f.contents.decode(self.config.encoding)
		translated = self.translate_text(kind, text, file_path=f.path)
		return dataclasses.replace(f, contents=translated.encode(self.config.encoding))

	def translate_files(self, files: Iterable[TranslatableFile]) -> Iterator[TranslatableFile]:
		for f in files:
			yield self.translate_file(f)
