from __future__ import annotations

from typing import Optional


class TranslationError(Exception):
	"""Base class for errors raised while translating source files."""


class CatalogLoadError(TranslationError):
	def __init__(self, path, reason: str):
		self.path = path
		self.reason = reason
		super().__init__(f"Could not load translation catalog {path}: {reason}")


class MissingTranslation(TranslationError):
	"""A marked string has no entry in the catalog while strict mode is on."""

	def __init__(self, catalog_path, file_path, original_text: str, translated_text: Optional[str] = None):
		self.catalog_path = catalog_path
		self.file_path = file_path
		self.original_text = original_text
		self.translated_text = translated_text
		super().__init__(
			f"Missing translation in {catalog_path}!\n"
			f"translated file {file_path}\n"
			f"originalText = '{original_text}'\n"
			f"translatedText = '{translated_text}'"
		)
