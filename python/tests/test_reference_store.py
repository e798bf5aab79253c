import json
import os
import unittest

from .test_utils import TempDirTestCase

from sync.errors import ConfigMissing
from sync.reference import ReferenceStore, RepositoryReference


class TestRepositoryReference(unittest.TestCase):
    def test_round_trip_dict_shape(self):
        ref = RepositoryReference("https://github.com/me/notes", "tkn")

        self.assertEqual(ref.to_dict(), {"repoUrl": "https://github.com/me/notes", "token": "tkn"})

    def test_public_reference_serializes_null_token(self):
        self.assertEqual(RepositoryReference("https://x").to_dict()["token"], None)

    def test_empty_token_is_treated_as_absent(self):
        ref = RepositoryReference.from_dict({"repoUrl": "https://x", "token": ""})

        self.assertIsNone(ref.token)

    def test_missing_url_is_rejected(self):
        with self.assertRaises(ValueError):
            RepositoryReference.from_dict({"token": None})


class TestReferenceStore(TempDirTestCase):
    def setUp(self):
        super().setUp()
        self.path = self.temp_path / "state" / "config.json"
        self.store = ReferenceStore(self.path)

    def test_save_then_load(self):
        ref = RepositoryReference("https://github.com/me/notes", "tkn")

        self.store.save(ref)

        self.assertEqual(self.store.load(), ref)
        with self.path.open(encoding="utf-8") as f:
            self.assertEqual(json.load(f), {"repoUrl": "https://github.com/me/notes", "token": "tkn"})

    def test_save_overwrites_previous_record(self):
        self.store.save(RepositoryReference("https://old"))
        self.store.save(RepositoryReference("https://new"))

        self.assertEqual(self.store.load().url, "https://new")
        leftovers = [p.name for p in self.path.parent.iterdir() if p.name != "config.json"]
        self.assertEqual(leftovers, [])

    @unittest.skipUnless(os.name == "posix", "permission bits are POSIX only")
    def test_saved_record_is_private_to_owner(self):
        self.store.save(RepositoryReference("https://x", "secret"))

        self.assertEqual(self.path.stat().st_mode & 0o777, 0o600)

    def test_load_missing_record_raises_config_missing(self):
        with self.assertRaises(ConfigMissing):
            self.store.load()

    def test_load_invalid_json_raises_config_missing(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")

        with self.assertRaises(ConfigMissing):
            self.store.load()

    def test_load_record_without_url_raises_config_missing(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text('{"token": null}', encoding="utf-8")

        with self.assertRaises(ConfigMissing):
            self.store.load()

    def test_load_non_object_raises_config_missing(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("[]", encoding="utf-8")

        with self.assertRaises(ConfigMissing):
            self.store.load()


if __name__ == "__main__":
    unittest.main()
