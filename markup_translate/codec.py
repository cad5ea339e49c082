"""Canonical lookup keys and re-encoding of translated text.

Catalog keys are built from extracted text with ``normalize_text`` (element
content) or ``normalize_attribute`` (attribute values). Translated values are
made safe for their destination with ``encode_attribute`` and
``encode_script_literal``.
"""

from __future__ import annotations
import html
import re

LINE_BREAK = "<br>"
ATTRIBUTE_LINE_SEPARATOR = "&#xa;"

WHITESPACE_RE = re.compile(r"[ \t\r\n]+")
LINE_END_RE = re.compile(r"\r\n|\r|\n")
SELF_CLOSING_RE = re.compile(r"\s*/>")


def decode_entities(text: str) -> str:
	# Repeat until stable so that decoding an already decoded key is a no-op.
	while True:
		decoded = html.unescape(text)
		if decoded == text:
			return decoded
		text = decoded


def normalize_text(text: str) -> str:
	"""Canonical key for element content and script literals.

	Entities are decoded, runs of spaces, tabs and line endings collapse to a
	single space, ``<br/>`` style remnants become ``<br>`` and the result is
	trimmed.
	"""
	text = decode_entities(text)
	text = WHITESPACE_RE.sub(" ", text)
	text = SELF_CLOSING_RE.sub(">", text)
	return text.strip()


def normalize_attribute(value: str) -> str:
	"""Canonical key for an attribute value.

	Unlike content, line endings are significant in attributes: each one is
	stored as ``LINE_BREAK`` so it survives the catalog round trip.
	"""
	value = decode_entities(value)
	value = LINE_END_RE.sub(LINE_BREAK, value)
	value = SELF_CLOSING_RE.sub(">", value)
	return value.strip()


def encode_attribute(text: str) -> str:
	"""Escape a translated value for embedding inside a double-quoted attribute."""
	text = SELF_CLOSING_RE.sub(">", text).replace(LINE_BREAK, "\n")
	text = (
		text.replace("&", "&amp;")
		.replace('"', "&quot;")
		.replace("<", "&lt;")
		.replace(">", "&gt;")
	)
	return LINE_END_RE.sub(ATTRIBUTE_LINE_SEPARATOR, text)


def encode_script_literal(text: str, quote: str) -> str:
	"""Escape a translated value for a script string literal delimited by ``quote``."""
	text = re.sub(r"(?<!\\)((?:\\\\)*)" + re.escape(quote), lambda m: m.group(1) + "\\" + quote, text)
	if quote != "`":
		text = LINE_END_RE.sub(r"\\n", text)
	return text
