import unittest

from threatwire.processors import strip_markup


class TestStripMarkup(unittest.TestCase):
    def test_plain_text_unchanged(self):
        self.assertEqual(strip_markup("Nothing to strip here"), "Nothing to strip here")

    def test_tags_removed(self):
        self.assertEqual(strip_markup("<p>Patch <b>now</b> or <a href='x'>read more</a></p>"), "Patch now or read more")

    def test_entities_decoded(self):
        self.assertEqual(strip_markup("AT&amp;T &lt;warns&gt; users"), "AT&T <warns> users")

    def test_script_and_style_bodies_dropped(self):
        text = strip_markup("<style>p {color: red}</style><p>Body</p><script>alert(1)</script>")
        self.assertEqual(text, "Body")

    def test_block_boundaries_separate_words(self):
        self.assertEqual(strip_markup("<p>First</p><p>Second</p>"), "First Second")
        self.assertEqual(strip_markup("line one<br/>line two"), "line one line two")

    def test_whitespace_collapsed(self):
        self.assertEqual(strip_markup("  a \n\n\t b  "), "a b")

    def test_empty_input(self):
        self.assertEqual(strip_markup(""), "")
        self.assertEqual(strip_markup(None), "")


if __name__ == "__main__":
    unittest.main()
