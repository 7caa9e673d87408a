import unittest

from odgate.errors import InvalidPathError
from odgate.util.paths import (
    from_remote_path,
    join_path,
    normalize_path,
    split_path,
    to_remote_path,
    validate_name,
)


class TestNormalize(unittest.TestCase):
    def test_collapses_separators(self) -> None:
        self.assertEqual(normalize_path("//a///b/"), "a/b")
        self.assertEqual(normalize_path("/"), "")
        self.assertEqual(normalize_path(""), "")

    def test_accepts_segment_sequences(self) -> None:
        self.assertEqual(normalize_path(["a", "", "b c"]), "a/b c")

    def test_is_case_sensitive(self) -> None:
        self.assertNotEqual(normalize_path("Docs"), normalize_path("docs"))

    def test_rejects_dot_segments(self) -> None:
        for bad in ("a/../b", "./a", "a/.", ".."):
            with self.subTest(path=bad):
                with self.assertRaises(InvalidPathError):
                    normalize_path(bad)

    def test_rejects_separator_inside_sequence_segment(self) -> None:
        with self.assertRaises(InvalidPathError):
            split_path(["a", "b/c"])

    def test_join_path_drops_empty_parts(self) -> None:
        self.assertEqual(join_path("/img/", "", ["2024", "03"], "cat.png"), "img/2024/03/cat.png")


class TestValidateName(unittest.TestCase):
    def test_accepts_plain_names(self) -> None:
        self.assertEqual(validate_name("readme.md"), "readme.md")
        self.assertEqual(validate_name(".password"), ".password")

    def test_rejects_bad_names(self) -> None:
        for bad in ("", "  ", "a/b", ".", ".."):
            with self.subTest(name=bad):
                with self.assertRaises(InvalidPathError):
                    validate_name(bad)


class TestRemotePath(unittest.TestCase):
    def test_root_maps_to_drive_root(self) -> None:
        self.assertEqual(to_remote_path(""), "root")
        self.assertEqual(from_remote_path("root"), "")

    def test_segments_are_percent_encoded(self) -> None:
        self.assertEqual(to_remote_path("a b/c:d#e"), "root:/a%20b/c%3Ad%23e:")

    def test_configured_root_is_prefixed_and_stripped(self) -> None:
        remote = to_remote_path("docs/x.txt", root_path="/share/")
        self.assertEqual(remote, "root:/share/docs/x.txt:")
        self.assertEqual(from_remote_path(remote, root_path="share"), "docs/x.txt")
        self.assertEqual(to_remote_path("", root_path="share"), "root:/share:")
        self.assertEqual(from_remote_path("root:/share:", root_path="share"), "")

    def test_round_trip(self) -> None:
        paths = [
            "",
            "a",
            "/a//b/",
            "with space/and%percent",
            "unicode/文件/naïve.txt",
            "odd/chars:?#&+=/x",
            "Case/case",
        ]
        for p in paths:
            for root in ("", "base/dir"):
                with self.subTest(path=p, root=root):
                    remote = to_remote_path(p, root_path=root)
                    self.assertEqual(from_remote_path(remote, root_path=root), normalize_path(p))

    def test_distinct_paths_do_not_collide(self) -> None:
        self.assertNotEqual(to_remote_path("a%2Fb"), to_remote_path("a/b"))
        self.assertNotEqual(to_remote_path("a b"), to_remote_path("a+b"))

    def test_from_remote_rejects_malformed(self) -> None:
        for bad in ("", "root:/", "root:/a", "/a/b", "root:/a//b:", "root:/a:b:"):
            with self.subTest(remote=bad):
                with self.assertRaises(InvalidPathError):
                    from_remote_path(bad)

    def test_from_remote_rejects_encoded_separator_and_dots(self) -> None:
        for bad in ("root:/a%2Fb:", "root:/%2E%2E/x:", "root:/./x:"):
            with self.subTest(remote=bad):
                with self.assertRaises(InvalidPathError):
                    from_remote_path(bad)

    def test_from_remote_rejects_path_outside_root(self) -> None:
        with self.assertRaises(InvalidPathError):
            from_remote_path("root:/other/x:", root_path="share")


if __name__ == "__main__":
    unittest.main()
