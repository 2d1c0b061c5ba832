"""
Command resolution tests.

Scope
- Deepest exact match along the leading tokens (names and aliases).
- full_name as typed, remaining tokens, option scope.
"""
import unittest
from unittest import TestCase

from wayfinder.resolver import resolve, scope_of

from doubles import tree


class ResolveTest(TestCase):
    def setUp(self):
        self.root = tree()
        self.build = self.root.child("build")
        self.deploy = self.root.child("deploy")
        self.preview = self.deploy.child("preview")

    def testEmptyTokensResolveRoot(self):
        command, remaining = resolve(self.root, [])
        self.assertIs(command.node, self.root)
        self.assertTrue(command.is_root)
        self.assertEqual(command.full_name, "tool")
        self.assertEqual(remaining, [])

    def testDeepestMatchWins(self):
        command, remaining = resolve(self.root, ["deploy", "preview", "--env", "dev"])
        self.assertIs(command.node, self.preview)
        self.assertEqual(command.full_name, "tool deploy preview")
        self.assertEqual(remaining, ["--env", "dev"])

    def testAliasAppearsAsTyped(self):
        command, remaining = resolve(self.root, ["b", "--release"])
        self.assertIs(command.node, self.build)
        self.assertEqual(command.full_name, "tool b")
        self.assertEqual(remaining, ["--release"])

    def testFlagStopsTheWalk(self):
        command, remaining = resolve(self.root, ["--verbose", "build"])
        self.assertIs(command.node, self.root)
        self.assertEqual(remaining, ["--verbose", "build"])

    def testNonChildTokenStopsTheWalk(self):
        command, remaining = resolve(self.root, ["deploy", "build"])
        self.assertIs(command.node, self.deploy)
        self.assertEqual(remaining, ["build"])

    def testMatchingIsExact(self):
        command, remaining = resolve(self.root, ["buidl"])
        self.assertIs(command.node, self.root)
        self.assertEqual(remaining, ["buidl"])

    def testScope(self):
        self.assertEqual(scope_of(self.root, self.root), self.root.options)
        self.assertEqual(scope_of(self.build, self.root), self.root.options + self.build.options)
        command, _ = resolve(self.root, ["build"])
        self.assertEqual(command.scope, self.root.options + self.build.options)


if __name__ == "__main__":
    unittest.main()
