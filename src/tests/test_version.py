import unittest

from pkghome.common_utils import ParseError
from pkghome.version import Constraint, Requirement, Version, compare, select_best


class TestVersion(unittest.TestCase):

    def test_parse_and_str(self):
        self.assertEqual("1.2.0", str(Version.parse("1.2.0")))
        self.assertEqual((1, 2, 0), Version.parse(" 1.2.0 ").components)

    def test_parse_rejects_malformed(self):
        for text in ("", "1.", ".1", "1..2", "1.a", "1.2-beta", "v1", "-1", "1.2a1", "1.0+local"):
            with self.subTest(text=text):
                with self.assertRaises(ParseError):
                    Version.parse(text)

    def test_parse_rejects_non_ascii_digits(self):
        with self.assertRaises(ParseError):
            Version.parse("\u0661.\u0662")

    def test_parse_rejects_non_string(self):
        with self.assertRaises(ParseError):
            Version.parse(1.2)

    def test_numeric_ordering(self):
        self.assertLess(Version.parse("1.9"), Version.parse("1.10"))
        self.assertLess(Version.parse("0.0.1"), Version.parse("0.0.2"))
        self.assertGreater(Version.parse("2"), Version.parse("1.99.99"))

    def test_trailing_zeros_are_padding(self):
        """Shorter versions are padded with zeros for ordering, equality and hashing."""
        self.assertEqual(Version.parse("1.0"), Version.parse("1.0.0"))
        self.assertEqual(hash(Version.parse("1")), hash(Version.parse("1.0.0")))
        self.assertLess(Version.parse("1.0"), Version.parse("1.0.1"))

    def test_compare(self):
        self.assertEqual(-1, compare("1.2", "1.3"))
        self.assertEqual(0, compare("1.2", "1.2.0"))
        self.assertEqual(1, compare(Version.parse("2.0"), "1.999"))

    def test_bump(self):
        self.assertEqual(Version.parse("1.3"), Version.parse("1.2.3").bump())
        self.assertEqual(Version.parse("2"), Version.parse("1.2").bump())
        self.assertEqual(Version.parse("2"), Version.parse("1").bump())


class TestConstraint(unittest.TestCase):

    def test_operators(self):
        cases = [
            ("= 1.0", "1.0", True),
            ("= 1.0", "1.0.1", False),
            ("= 1.0", "1.0.0", True),
            ("!= 1.0", "1.0.0", False),
            ("!= 1.0", "1.0.1", True),
            ("< 1.0", "0.9", True),
            ("< 1.0", "1.0", False),
            ("<= 1.0", "1.0", True),
            ("> 1.0", "1.0", False),
            (">= 1.0", "1.0", True),
            ("~> 1.2", "1.9", True),
            ("~> 1.2", "2.0", False),
            ("~> 1.2.3", "1.2.9", True),
            ("~> 1.2.3", "1.3", False),
            ("~> 1.2.3", "1.2.2", False),
        ]
        for constraint, version, expected in cases:
            with self.subTest(constraint=constraint, version=version):
                self.assertEqual(expected, Constraint.parse(constraint).satisfied_by(version))

    def test_bare_version_means_equal(self):
        self.assertEqual(Constraint("=", "0.0.2"), Constraint.parse("0.0.2"))

    def test_no_space_after_operator(self):
        self.assertEqual(Constraint("<", "0.0.2"), Constraint.parse("<0.0.2"))

    def test_unknown_operator(self):
        with self.assertRaises(ParseError):
            Constraint("=~", "1.0")
        with self.assertRaises(ParseError):
            Constraint.parse("=> 1.0")


class TestRequirement(unittest.TestCase):

    def test_none_matches_everything(self):
        requirement = Requirement.parse(None)
        self.assertTrue(requirement.satisfied_by("0"))
        self.assertTrue(requirement.satisfied_by("99.1"))

    def test_comma_separated_conjunction(self):
        requirement = Requirement.parse(">= 1.0, < 2")
        self.assertTrue(requirement.satisfied_by("1.5"))
        self.assertFalse(requirement.satisfied_by("2.0"))
        self.assertFalse(requirement.satisfied_by("0.9"))

    def test_list_and_version_inputs(self):
        self.assertEqual(Requirement.parse(">= 1.0, < 2"), Requirement.parse([">= 1.0", "< 2"]))
        self.assertEqual(Requirement.parse("= 1.2"), Requirement.parse(Version.parse("1.2")))

    def test_empty_string_is_an_error(self):
        with self.assertRaises(ParseError):
            Requirement.parse(" , ")

    def test_select_best(self):
        versions = ["0.0.1", "0.0.2", "0.1"]
        self.assertEqual(Version.parse("0.1"), select_best(versions))
        self.assertEqual(Version.parse("0.0.1"), select_best(versions, "<0.0.2"))
        self.assertEqual(Version.parse("0.0.2"), select_best(versions, "=0.0.2"))
        self.assertIsNone(select_best(versions, "> 1"))


if __name__ == "__main__":
    unittest.main()
