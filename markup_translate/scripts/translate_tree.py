#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
translate_tree.py — Build-time translation of HTML and JS sources from a gettext catalog.

Key points
- HTML: content of `i18n` elements and configured/`i18n-*` attributes is replaced with
  catalog translations; `no-i18n` excludes a subtree. All markers are removed from output.
- JS: string literals passed to the i18n call (`_('Save')`) are replaced, quoting preserved.
- Without `--po` only the markers are stripped, which is the production build for the
  source language.
- Missing translations fail the build unless `--no-throw` is given.
- Supports in-place or output-directory builds, atomic writes, unified-diff dry-run,
  ignore globs, and threads.
"""

from __future__ import annotations
import argparse
import concurrent.futures as cf
import dataclasses
import difflib
import fnmatch
import hashlib
import logging
import os
import pathlib
import sys
import tempfile
import threading
from typing import Iterable, List, Optional, Tuple

from markup_translate.exceptions import CatalogLoadError, MissingTranslation
from markup_translate.translator import TranslatableFile, Translator, TranslatorConfig

INCLUDE_EXTS: Tuple[str, ...] = (".html", ".htm", ".js", ".mjs")

# Package logger writes to stderr by default; library modules and this script log through it.
package_logger = logging.getLogger("markup_translate")
if not package_logger.handlers:
	h = logging.StreamHandler()
	h.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
	package_logger.addHandler(h)
	package_logger.setLevel(logging.WARNING)

logger = logging.getLogger(__name__)


@dataclasses.dataclass
class ProcessStats:
	scanned: int = 0
	changed: int = 0
	written: int = 0


# ── Filesystem ops (atomic, reporting, ignore) ────────────────────────────────
def is_ignored(base: pathlib.Path, path: pathlib.Path, ignore_globs: List[str]) -> bool:
	try:
		rel = str(path.relative_to(base)).replace("\\", "/")
	except ValueError:
		return True
	return any(fnmatch.fnmatch(rel, pat) for pat in ignore_globs)


def atomic_write(path: pathlib.Path, data: bytes) -> None:
	"""Atomically write ``data`` to ``path``.

	This function writes to a temporary file in the same directory, fsyncs,
	then replaces the target. If the target exists, its permissions are
	preserved when possible.
	"""
	tmp_dir = path.parent
	tmp_dir.mkdir(parents=True, exist_ok=True)
	orig_mode = None
	try:
		orig_mode = path.stat().st_mode & 0o777
	except OSError:
		orig_mode = None

	tf = None
	try:
		with tempfile.NamedTemporaryFile("wb", delete=False, dir=tmp_dir) as tf:
			tf.write(data)
			tf.flush()
			os.fsync(tf.fileno())
		os.replace(tf.name, str(path))
		if orig_mode is not None:
			try:
				os.chmod(str(path), orig_mode)
			except OSError:
				logger.debug("Failed to chmod %s", path)
	finally:
		if tf is not None and os.path.exists(tf.name):
			try:
				os.unlink(tf.name)
			except OSError:
				logger.debug("Failed to remove temporary file %s", tf.name)


def unified_diff(a: str, b: str, path: pathlib.Path) -> str:
	return "".join(
		difflib.unified_diff(
			a.splitlines(keepends=True),
			b.splitlines(keepends=True),
			fromfile=f"a/{path}",
			tofile=f"b/{path}",
		)
	)


def write_backup(p: pathlib.Path, data: bytes) -> None:
	backup_path = p.with_name(f"{p.name}.{hashlib.sha1(data).hexdigest()[:8]}.bak")
	try:
		atomic_write(backup_path, data)
	except OSError as e:
		logger.warning("Could not write backup %s: %s", backup_path, e)


# ── Main processing ──────────────────────────────────────────────────────────
def read_source(p: pathlib.Path, base: pathlib.Path, max_file_size: Optional[int] = None) -> Optional[TranslatableFile]:
	# Safety checks: skip symlinks and very large files (configurable)
	try:
		if p.is_symlink():
			logger.warning("Skipping symlink: %s", p)
			return None
		if max_file_size and p.stat().st_size > max_file_size:
			logger.warning("Skipping large file (> %d bytes): %s", max_file_size, p)
			return None
		data = p.read_bytes()
	except OSError as e:
		logger.warning("Failed to read %s: %s", p, e)
		return None
	return TranslatableFile(path=p, relative=p.relative_to(base).as_posix(), contents=data)


def process_file(
	translator: Translator,
	f: TranslatableFile,
	output: Optional[pathlib.Path] = None,
	dry: bool = False,
	no_backup: bool = False,
	emit_diff: bool = False,
) -> Tuple[int, int, Optional[str]]:
	"""Translate one file and write the result.

	Returns ``(changed, written, diff)``. ``MissingTranslation`` propagates to the caller.
	"""
	try:
		new = translator.translate_file(f)
	except UnicodeDecodeError as e:
		logger.warning("Failed to decode %s: %s", f.path, e)
		return 0, 0, None
	changed = int(new.contents != f.contents)
	target = output / f.relative if output is not None else f.path

	if dry:
		diff = None
		if changed and emit_diff:
			encoding = translator.config.encoding
			diff = unified_diff(f.contents.decode(encoding), new.contents.decode(encoding), f.relative)
		return changed, 0, diff

	# In place, untouched files stay untouched; an output tree gets every file.
	if output is None and not changed:
		return 0, 0, None
	if output is None and not no_backup:
		write_backup(f.path, f.contents)
	try:
		atomic_write(target, new.contents)
	except OSError as e:
		logger.error("Failed to write %s: %s", target, e)
		return changed, 0, None
	return changed, 1, None


def discover_files(base: pathlib.Path, include_exts: Iterable[str] = INCLUDE_EXTS) -> Iterable[pathlib.Path]:
	for ext in include_exts:
		yield from base.rglob(f"*{ext}")


def build_config(args: argparse.Namespace) -> TranslatorConfig:
	return TranslatorConfig(
		po_path=pathlib.Path(args.po) if args.po else None,
		attributes=tuple(a.strip() for a in args.attrs.split(",") if a.strip()),
		translated_tags=tuple(t.strip() for t in args.translated_tags.split(",") if t.strip()),
		throw_on_missing=not args.no_throw,
		call_name=args.call_name,
	)


def run(args: argparse.Namespace) -> int:
	if args.verbose:
		package_logger.setLevel(logging.DEBUG)

	base = pathlib.Path(args.target).resolve()
	if not base.is_dir():
		logger.error("Target not found: %s", base)
		return 2
	output = pathlib.Path(args.output).resolve() if args.output else None
	ignore_globs = args.ignore or []

	# The catalog is complete before any worker starts.
	try:
		translator = Translator(build_config(args))
	except CatalogLoadError as e:
		logger.error("%s", e)
		return 2
	if translator.catalog is None:
		logger.info("No catalog given, stripping i18n markers only")

	files = [p for p in discover_files(base) if not is_ignored(base, p, ignore_globs)]
	if output is not None:
		files = [p for p in files if output not in p.parents]
	stats = ProcessStats()
	diffs: List[str] = []
	failed = threading.Event()

	def _work(p: pathlib.Path):
		# Once a translation is missing the build is lost: write nothing more.
		if failed.is_set():
			return 0, 0, None
		f = read_source(p, base, max_file_size=args.max_file_size)
		if f is None:
			return 0, 0, None
		try:
			return process_file(
				translator,
				f,
				output=output,
				dry=args.dry_run,
				no_backup=args.no_backup,
				emit_diff=args.diff,
			)
		except MissingTranslation:
			failed.set()
			raise

	# Threaded I/O for speed
	with cf.ThreadPoolExecutor(max_workers=max(1, args.threads)) as ex:
		futures = [ex.submit(_work, p) for p in files]
		for fut in futures:
			try:
				c, w, d = fut.result()
			except MissingTranslation as e:
				ex.shutdown(wait=True, cancel_futures=True)
				logger.error("%s", e)
				return 1
			stats.scanned += 1
			stats.changed += c
			stats.written += w
			if d:
				diffs.append(d)

	if args.diff and diffs:
		sys.stdout.write("\n".join(diffs))

	print(f"\nDone. Files scanned: {stats.scanned}, changed: {stats.changed}, written: {stats.written}")
	return 0


def build_arg_parser() -> argparse.ArgumentParser:
	ap = argparse.ArgumentParser(description="Translate i18n-marked HTML and JS sources from a PO catalog")
	ap.add_argument("--target", required=True, help="Source root directory")
	ap.add_argument("--output", help="Write translated tree here instead of in place")
	ap.add_argument("--po", help="PO catalog; without it only the i18n markers are stripped")
	ap.add_argument("--attrs", default="placeholder,title,alt,data-title,data-tooltip", help="Attributes always translated (comma-separated)")
	ap.add_argument("--translated-tags", default="", help="Tags whose content is always translated (comma-separated)")
	ap.add_argument("--call-name", default="_", help="Script i18n function name (default: _)")
	ap.add_argument("--no-throw", action="store_true", help="Keep the original text when a translation is missing")
	ap.add_argument("--dry-run", action="store_true", help="Report only; no writes")
	ap.add_argument("--no-backup", action="store_true", help="Do not write .bak backups for in-place changes")
	ap.add_argument("--ignore", action="append", default=[], help="Glob patterns to exclude (repeatable)")
	ap.add_argument("--threads", type=int, default=os.cpu_count() or 4, help="Parallel file workers")
	ap.add_argument("--diff", action="store_true", help="Print unified diff for changes (with --dry-run)")
	ap.add_argument("--max-file-size", type=int, default=2*1024*1024, help="Skip files larger than this many bytes (0 to disable)")
	ap.add_argument("--verbose", action="store_true", help="Debug logging")
	return ap


def main():
	args = build_arg_parser().parse_args()
	sys.exit(run(args))


if __name__ == "__main__":
	main()
