import unittest

from pkghome_testcase import PkgHomeTestCase

from pkghome.common_utils import FileNotFound, NoMatchingVersion, UnknownPackage
from pkghome.registry import SourceIndex
from pkghome.searcher import PathSearcher


class TestPathSearcher(PkgHomeTestCase):

    def setUp(self):
        super().setUp()
        self.make_packages()
        self.searcher = PathSearcher(SourceIndex.from_roots([self.pkghome]))

    def test_all_load_paths(self):
        expected = [
            self.gem_path("a-0.0.1", "lib"),
            self.gem_path("a-0.0.2", "lib"),
            self.gem_path("b-0.0.2", "lib"),
            self.gem_path("c-1.2", "lib"),
        ]
        self.assertEqual(expected, sorted(self.searcher.all_load_paths()))

    def test_latest_load_paths(self):
        """Superseded versions never contribute a load path."""
        expected = [
            self.gem_path("a-0.0.2", "lib"),
            self.gem_path("b-0.0.2", "lib"),
            self.gem_path("c-1.2", "lib"),
        ]
        self.assertEqual(expected, sorted(self.searcher.latest_load_paths()))

    def test_every_declared_lib_dir_is_listed(self):
        self.quick_package("multi", "1.0", lib_dirs=["lib", "ext"])
        searcher = PathSearcher(SourceIndex.from_roots([self.pkghome]))
        paths = searcher.all_load_paths()
        self.assertIn(self.gem_path("multi-1.0", "lib"), paths)
        self.assertIn(self.gem_path("multi-1.0", "ext"), paths)
        self.assertEqual(6, len(paths))

    def test_required_location(self):
        self.assertEqual(
            self.gem_path("c-1.2", "lib", "code.py"),
            self.searcher.required_location("c", "code.py"),
        )
        self.assertEqual(
            self.gem_path("a-0.0.1", "lib", "code.py"),
            self.searcher.required_location("a", "code.py", "<0.0.2"),
        )
        self.assertEqual(
            self.gem_path("a-0.0.2", "lib", "code.py"),
            self.searcher.required_location("a", "code.py", "=0.0.2"),
        )

    def test_required_location_uses_first_lib_dir_containing_the_file(self):
        self.quick_package(
            "split", "1.0", lib_dirs=["lib", "ext"],
            files={"ext/native.py": "", "lib/pure.py": "", "ext/pure.py": ""},
        )
        searcher = PathSearcher(SourceIndex.from_roots([self.pkghome]))
        self.assertEqual(
            self.gem_path("split-1.0", "ext", "native.py"),
            searcher.required_location("split", "native.py"),
        )
        self.assertEqual(
            self.gem_path("split-1.0", "lib", "pure.py"),
            searcher.required_location("split", "pure.py"),
        )

    def test_required_location_missing_file(self):
        with self.assertRaises(FileNotFound) as ctx:
            self.searcher.required_location("c", "nope.py")
        self.assertEqual("c-1.2", ctx.exception.package_name)
        self.assertIsInstance(ctx.exception, FileNotFoundError)

    def test_required_location_propagates_lookup_errors(self):
        with self.assertRaises(UnknownPackage):
            self.searcher.required_location("xyzzy", "code.py")
        with self.assertRaises(NoMatchingVersion):
            self.searcher.required_location("a", "code.py", "> 2")

    def test_find(self):
        self.assertEqual("c-1.2", self.searcher.find("code.py").full_name)
        self.assertIsNone(self.searcher.find("missing.py"))


if __name__ == "__main__":
    unittest.main()
