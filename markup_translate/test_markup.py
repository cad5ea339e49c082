import unittest

from bs4 import BeautifulSoup

from markup_translate.catalog import Catalog
from markup_translate.exceptions import MissingTranslation
from markup_translate.markup import MarkupTranslator, strip_all_markers


def _translator(messages=None, **kwargs):
    catalog = Catalog(messages or {}, origin="fr.po") if messages is not None else None
    return MarkupTranslator(catalog, **kwargs)


class TestContentTranslation(unittest.TestCase):
    def test_marked_content_is_translated_and_marker_removed(self):
        t = _translator({"Hello world": "Bonjour monde"})
        self.assertEqual(t.translate("<p i18n>Hello   world</p>"), "<p>Bonjour monde</p>")

    def test_nested_markup_is_part_of_the_key(self):
        t = _translator({"Click <b>here</b>": "Cliquez <b>ici</b>"})
        self.assertEqual(
            t.translate("<p i18n>Click\n  <b>here</b></p>"),
            "<p>Cliquez <b>ici</b></p>",
        )

    def test_entities_are_decoded_for_lookup(self):
        t = _translator({"Fish & Chips": "Poisson &amp; frites"})
        self.assertEqual(t.translate("<p i18n>Fish &amp; Chips</p>"), "<p>Poisson &amp; frites</p>")

    def test_self_closing_line_break_in_key(self):
        t = _translator({"Line<br>next": "Ligne<br>suivante"})
        self.assertEqual(t.translate("<p i18n>Line<br/>next</p>"), "<p>Ligne<br>suivante</p>")

    def test_translated_tags_need_no_marker(self):
        t = _translator({"Title": "Titre"}, translated_tags=["h1"])
        self.assertEqual(t.translate("<h1>Title</h1><h2>Title</h2>"), "<h1>Titre</h1><h2>Title</h2>")

    def test_empty_content_is_a_no_op(self):
        t = _translator({})
        self.assertEqual(t.translate("<span i18n>  </span>"), "<span>  </span>")

    def test_void_element_with_marker(self):
        t = _translator({"Name": "Nom"}, attributes=["placeholder"])
        self.assertEqual(t.translate('<input i18n placeholder="Name" />'), '<input placeholder="Nom">')

    def test_translated_content_is_not_walked_again(self):
        t = _translator({"Go": '<a title="Go">Allez</a>'}, attributes=["title"])
        self.assertEqual(t.translate("<p i18n>Go</p>"), '<p><a title="Go">Allez</a></p>')

    def test_markers_in_translated_content_are_removed(self):
        t = _translator({'Click <b i18n-title title="x">here</b>': 'Cliquez <b i18n-title title="x">ici</b>'})
        self.assertEqual(
            t.translate('<p i18n>Click <b i18n-title title="x">here</b></p>'),
            '<p>Cliquez <b title="x">ici</b></p>',
        )

    def test_surrounding_document_is_preserved(self):
        t = _translator({"Hi": "Salut"})
        source = (
            '<div class="a  b" id="x"><!-- note --><p i18n>Hi</p>'
            '<script>if (a < b) { x = "<b>"; }</script></div>'
        )
        self.assertEqual(
            t.translate(source),
            '<div class="a  b" id="x"><!-- note --><p>Salut</p>'
            '<script>if (a < b) { x = "<b>"; }</script></div>',
        )


class TestExclusion(unittest.TestCase):
    def test_descendants_of_no_i18n_are_not_translated(self):
        t = _translator({"Hello": "Bonjour"})
        self.assertEqual(
            t.translate("<div no-i18n><p i18n>Hello</p></div>"),
            "<div><p>Hello</p></div>",
        )

    def test_exclusion_reaches_the_whole_subtree(self):
        t = _translator({"Hello": "Bonjour", "Hi": "Salut"}, attributes=["title"])
        self.assertEqual(
            t.translate('<section no-i18n><div><span i18n i18n-data-x data-x="Hi" title="Hi">Hello</span></div></section>'),
            '<section><div><span data-x="Hi" title="Hi">Hello</span></div></section>',
        )

    def test_no_i18n_element_keeps_its_content_but_translates_attributes(self):
        t = _translator({"Hi": "Salut"}, attributes=["title"])
        self.assertEqual(
            t.translate('<div i18n no-i18n title="Hi"><p>Hi</p></div>'),
            '<div title="Salut"><p>Hi</p></div>',
        )

    def test_siblings_after_excluded_subtree_are_translated(self):
        t = _translator({"Hello": "Bonjour"})
        self.assertEqual(
            t.translate("<div no-i18n><p i18n>Hello</p></div><p i18n>Hello</p>"),
            "<div><p>Hello</p></div><p>Bonjour</p>",
        )

    def test_excluded_subtree_keeps_its_source_bytes(self):
        t = _translator({})
        self.assertEqual(
            t.translate('<div no-i18n><p title="a &quot;b&quot;">&copy; 2024&nbsp;Acme</p></div>'),
            '<div><p title="a &quot;b&quot;">&copy; 2024&nbsp;Acme</p></div>',
        )


class TestAttributeTranslation(unittest.TestCase):
    def test_automatic_attribute(self):
        t = _translator({"Logo": "Le logo"}, attributes=["alt"])
        self.assertEqual(t.translate('<img src="a.png" alt="Logo">'), '<img src="a.png" alt="Le logo">')

    def test_veto_keeps_value_and_drops_marker(self):
        t = _translator({}, attributes=["alt"])
        self.assertEqual(t.translate('<img alt="Logo" no-i18n-alt>'), '<img alt="Logo">')

    def test_opt_in_attribute(self):
        t = _translator({"Go": "Aller"})
        self.assertEqual(
            t.translate('<a i18n-title title="Go" href="/x">Go</a>'),
            '<a title="Aller" href="/x">Go</a>',
        )

    def test_opt_in_without_attribute_only_drops_marker(self):
        t = _translator({})
        self.assertEqual(t.translate('<a i18n-title href="/x">Go</a>'), '<a href="/x">Go</a>')

    def test_opt_in_automatic_attribute_is_translated_once(self):
        t = _translator({"A": "B", "B": "C"}, attributes=["title"])
        self.assertEqual(t.translate('<a i18n-title title="A">x</a>'), '<a title="B">x</a>')

    def test_attributes_to_translate_order(self):
        t = _translator({}, attributes=["title", "alt", "placeholder"])
        soup = BeautifulSoup(
            '<img i18n-data-tip data-tip="t" alt="a" title="x" no-i18n-title placeholder="p">',
            "html.parser",
        )
        self.assertEqual(t.attributes_to_translate(soup.img), ["alt", "placeholder", "data-tip"])

    def test_quotes_and_brackets_are_escaped(self):
        t = _translator({"Name": 'Say "hi" <now>'}, attributes=["placeholder"])
        self.assertEqual(
            t.translate('<input placeholder="Name">'),
            '<input placeholder="Say &quot;hi&quot; &lt;now&gt;">',
        )

    def test_newline_survives_as_line_separator(self):
        t = _translator({"Line one<br>Line two": "Ligne un<br>Ligne deux"}, attributes=["alt"])
        out = t.translate('<img alt="Line one\nLine two">')
        self.assertEqual(out, '<img alt="Ligne un&#xa;Ligne deux">')
        self.assertEqual(BeautifulSoup(out, "html.parser").img["alt"], "Ligne un\nLigne deux")

    def test_untranslated_attributes_keep_their_value(self):
        t = _translator({}, attributes=["title"])
        self.assertEqual(t.translate('<p data-x="a &amp; b">x</p>'), '<p data-x="a &amp; b">x</p>')


class TestMissingTranslation(unittest.TestCase):
    def test_strict_mode_raises_for_content(self):
        t = _translator({})
        with self.assertRaises(MissingTranslation) as ctx:
            t.translate("<p i18n>Hello   world</p>", file_path="src/index.html")
        err = ctx.exception
        self.assertEqual(err.catalog_path, "fr.po")
        self.assertEqual(err.file_path, "src/index.html")
        self.assertEqual(err.original_text, "Hello world")
        self.assertIn("src/index.html", str(err))

    def test_strict_mode_raises_for_attribute(self):
        t = _translator({}, attributes=["title"])
        with self.assertRaises(MissingTranslation) as ctx:
            t.translate('<p title="Tip">x</p>')
        self.assertEqual(ctx.exception.original_text, "Tip")

    def test_non_strict_mode_keeps_original(self):
        t = _translator({}, attributes=["title"], throw_on_missing=False)
        self.assertEqual(
            t.translate('<p i18n title="Tip">Hello   world</p>'),
            '<p title="Tip">Hello   world</p>',
        )

    def test_non_strict_miss_still_walks_children(self):
        t = _translator({"Hi": "Salut"}, throw_on_missing=False)
        self.assertEqual(
            t.translate("<div i18n>Hello <b i18n>Hi</b></div>"),
            "<div>Hello <b>Salut</b></div>",
        )


class TestNoCatalog(unittest.TestCase):
    SOURCE = (
        '<div no-i18n><p i18n class="a  b" i18n-title title="T">Text &amp; more</p>'
        '<img no-i18n-alt alt="x"><span i18nfoo>y</span></div>'
    )
    EXPECTED = (
        '<div><p class="a  b" title="T">Text &amp; more</p>'
        '<img alt="x"><span>y</span></div>'
    )

    def test_markers_are_stripped(self):
        t = _translator(None, attributes=["title", "alt"])
        self.assertEqual(t.translate(self.SOURCE), self.EXPECTED)

    def test_character_references_are_kept(self):
        self.assertEqual(_translator(None).translate("<p i18n>&copy; 2024&nbsp;Acme</p>"), "<p>&copy; 2024&nbsp;Acme</p>")
        self.assertEqual(strip_all_markers('<a i18n-title title="&lt;&#39;x&#39;&gt;">&#169;</a>'), '<a title="&lt;&#39;x&#39;&gt;">&#169;</a>')

    def test_document_prologue_is_kept(self):
        source = '<!DOCTYPE html>\n<html lang="fr"><body><p i18n>Hi</p></body></html>\n'
        expected = '<!DOCTYPE html>\n<html lang="fr"><body><p>Hi</p></body></html>\n'
        self.assertEqual(_translator(None).translate(source), expected)
        self.assertEqual(_translator({"Hi": "Salut"}).translate(source), expected.replace("Hi", "Salut"))
