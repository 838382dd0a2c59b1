import unittest

from s3_file_manager import keys


class DestinationFromSourceTests(unittest.TestCase):
    def test_file_lands_inside_directory_prefix(self):
        self.assertEqual("archive/a.txt", keys.destination_from_source("docs/a.txt", "archive/"))

    def test_directory_keeps_trailing_slash(self):
        self.assertEqual("archive/sub/", keys.destination_from_source("docs/sub/", "archive/"))

    def test_full_destination_key_is_returned_unchanged(self):
        self.assertEqual("archive/b.txt", keys.destination_from_source("docs/a.txt", "archive/b.txt"))

    def test_root_destination(self):
        self.assertEqual("/a.txt", keys.destination_from_source("a.txt", "/"))


class RenameTrailingSegmentTests(unittest.TestCase):
    def test_directory_result_is_wrapped_in_slashes(self):
        self.assertEqual("/a/new/", keys.rename_trailing_segment("a/b/", "new"))

    def test_file_replaces_last_segment(self):
        self.assertEqual("a/c.txt", keys.rename_trailing_segment("a/b.txt", "c.txt"))

    def test_renaming_back_restores_directory_key(self):
        for key in ("a/b/", "/a/b/", "docs/sub/deep/"):
            renamed = keys.rename_trailing_segment(key, "other")
            restored = keys.rename_trailing_segment(renamed, keys.object_name(key))

            self.assertEqual(keys.normalize_directory_prefix(key), keys.normalize_directory_prefix(restored))

    def test_key_without_segments_uses_new_name(self):
        self.assertEqual("/new/", keys.rename_trailing_segment("/", "new"))
        self.assertEqual("/new/", keys.rename_trailing_segment("//", "new"))


class RewritePrefixTests(unittest.TestCase):
    def test_replaces_matching_prefix(self):
        self.assertEqual(
            "archive/docs/sub/a.txt",
            keys.rewrite_prefix("docs/sub/a.txt", "docs/", "archive/docs/"),
        )

    def test_normalizes_slashes_on_both_prefixes(self):
        self.assertEqual("x/a.txt", keys.rewrite_prefix("docs/a.txt", "/docs", "/x"))

    def test_falls_back_to_first_segment(self):
        self.assertEqual("x/a.txt", keys.rewrite_prefix("other/a.txt", "docs/", "x/"))

    def test_nested_source_prefix_keeps_remaining_path(self):
        self.assertEqual(
            "docs/renamed/deep/a.txt",
            keys.rewrite_prefix("docs/sub/deep/a.txt", "docs/sub/", "/docs/renamed/"),
        )


class PathHelperTests(unittest.TestCase):
    def test_split_parent_segment(self):
        self.assertEqual("b", keys.split_parent_segment("a/b/"))
        self.assertEqual("a", keys.split_parent_segment("a"))

    def test_object_name(self):
        self.assertEqual("b", keys.object_name("a/b/"))
        self.assertEqual("c.txt", keys.object_name("a/b/c.txt"))
        self.assertEqual("", keys.object_name("/"))

    def test_is_directory_key(self):
        self.assertTrue(keys.is_directory_key("docs/"))
        self.assertFalse(keys.is_directory_key("docs/a.txt"))

    def test_normalize_directory_prefix(self):
        self.assertEqual("", keys.normalize_directory_prefix("/"))
        self.assertEqual("", keys.normalize_directory_prefix(""))
        self.assertEqual("a/b/", keys.normalize_directory_prefix("/a/b"))

    def test_to_object_key_strips_leading_slashes(self):
        self.assertEqual("new/", keys.to_object_key("//new/"))

    def test_normalize_path(self):
        self.assertEqual("", keys.normalize_path("/"))
        self.assertEqual("a/b/", keys.normalize_path("a/b"))
        self.assertEqual("a/", keys.normalize_path("/a/"))

    def test_parent_path(self):
        self.assertEqual("a/", keys.parent_path("a/b/"))
        self.assertEqual("", keys.parent_path("a/"))
        self.assertEqual("", keys.parent_path(""))

    def test_compose_key(self):
        self.assertEqual("docs/f.txt", keys.compose_key("docs", "f.txt"))
        self.assertEqual("f.txt", keys.compose_key("", "f.txt"))
        self.assertEqual("docs/f", keys.compose_key(" /docs/", " f "))

    def test_compose_key_rejects_blank_name(self):
        with self.assertRaises(ValueError):
            keys.compose_key("docs/", "  ")


if __name__ == "__main__":
    unittest.main()
