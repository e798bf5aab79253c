"""Tests for corpus construction from the mirror directory."""

import os
import unittest
from pathlib import Path
from unittest.mock import patch

from .test_utils import TempDirTestCase

from search.content_loader import decode_permissive, load_corpus
from sync.errors import DecodeWarning


class TestLoadCorpus(TempDirTestCase):
    def _write(self, relative: str, content, binary: bool = False) -> Path:
        path = self.temp_path / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if binary:
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
        return path

    def test_missing_root_gives_empty_corpus(self):
        corpus = load_corpus(self.temp_path / "does-not-exist")

        self.assertEqual(corpus.text, "")
        self.assertEqual(corpus.files, [])

    def test_empty_root_gives_empty_corpus(self):
        corpus = load_corpus(self.temp_path)

        self.assertEqual(str(corpus), "")
        self.assertEqual(len(corpus), 0)

    def test_concatenates_nested_files_without_separator(self):
        self._write("notes-master/a.md", "alpha")
        self._write("notes-master/sub/b.md", "beta")

        corpus = load_corpus(self.temp_path)

        self.assertEqual(len(corpus.text), len("alpha") + len("beta"))
        self.assertIn("alpha", corpus.text)
        self.assertIn("beta", corpus.text)
        self.assertEqual(corpus.stats.total_files, 2)

    def test_files_of_a_directory_precede_its_subdirectories(self):
        self._write("root.md", "ROOT")
        self._write("sub/child.md", "CHILD")

        corpus = load_corpus(self.temp_path)

        self.assertEqual(corpus.text, "ROOTCHILD")

    def test_order_is_stable_between_loads(self):
        for i in range(5):
            self._write(f"dir{i}/note{i}.md", f"note-{i};")

        first = load_corpus(self.temp_path).text
        second = load_corpus(self.temp_path).text

        self.assertEqual(first, second)

    def test_provenance_spans_cover_each_file(self):
        a = self._write("a.md", "aaa")

        corpus = load_corpus(self.temp_path)

        self.assertEqual(len(corpus.files), 1)
        span = corpus.files[0]
        self.assertEqual((span.path, span.start, span.end), (a, 0, 3))
        self.assertEqual(corpus.source_at(1), a)
        self.assertIsNone(corpus.source_at(3))

    def test_invalid_utf8_is_replaced_not_fatal(self):
        self._write("bad.md", b"[tags]: <> x\n\xff\xfe broken\n", binary=True)
        self._write("good.md", "fine")

        corpus = load_corpus(self.temp_path)

        self.assertIn("[tags]: <> x", corpus.text)
        self.assertIn("�", corpus.text)
        self.assertIn("fine", corpus.text)
        self.assertEqual(len(corpus.decode_warnings), 1)
        self.assertIsInstance(corpus.decode_warnings[0], DecodeWarning)
        self.assertEqual(corpus.decode_warnings[0].path.name, "bad.md")

    def test_binary_files_are_included_permissively(self):
        self._write("image.png", b"\x89PNG\r\n\x1a\n\x00\x00", binary=True)

        corpus = load_corpus(self.temp_path)

        self.assertEqual(corpus.stats.total_files, 1)
        self.assertTrue(corpus.text.startswith("�PNG"))

    def test_excluded_paths_are_not_loaded(self):
        config = self._write("config.json", '{"token": "secret"}')
        self._write("temp/stock-master.zip", b"PK\x03\x04", binary=True)
        self._write("notes/a.md", "visible")

        corpus = load_corpus(self.temp_path, exclude=(config, self.temp_path / "temp"))

        self.assertEqual(corpus.text, "visible")
        self.assertNotIn("secret", corpus.text)

    def test_unreadable_file_is_skipped(self):
        self._write("a.md", "readable")
        self._write("b.md", "also readable")
        original_read_bytes = Path.read_bytes

        def flaky_read(path):
            if path.name == "b.md":
                raise PermissionError("denied")
            return original_read_bytes(path)

        with patch.object(Path, "read_bytes", flaky_read):
            corpus = load_corpus(self.temp_path)

        self.assertEqual(corpus.text, "readable")
        self.assertEqual(corpus.stats.error_files, 1)

    @unittest.skipIf(os.name == "nt", "symlinks need privileges on Windows")
    def test_symlinks_are_not_followed(self):
        outside = self.temp_path / "outside"
        outside.mkdir()
        (outside / "secret.md").write_text("outside content", encoding="utf-8")
        mirror = self.temp_path / "mirror"
        mirror.mkdir()
        (mirror / "note.md").write_text("inside", encoding="utf-8")
        os.symlink(outside, mirror / "link")

        corpus = load_corpus(mirror)

        self.assertEqual(corpus.text, "inside")


class TestDecodePermissive(unittest.TestCase):
    def test_clean_utf8(self):
        self.assertEqual(decode_permissive("héllo".encode("utf-8")), ("héllo", 0))

    def test_counts_only_introduced_replacements(self):
        data = "keep �".encode("utf-8") + b"\xff"

        text, replaced = decode_permissive(data)

        self.assertEqual(text, "keep ��")
        self.assertEqual(replaced, 1)


if __name__ == "__main__":
    unittest.main()
