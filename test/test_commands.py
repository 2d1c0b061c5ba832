"""
Command declaration tests.

Scope
- Construction checks (names, aliases, specs, collisions).
- Tree composition (parent/children, aliases, mounting rules).
- The command() decorator forms.
- FoundCommand delegation and Context bookkeeping.
"""
import unittest
from unittest import TestCase

from wayfinder import Command, command, FoundCommand, Context, Boolean, String, Array


class CommandConstructionTest(TestCase):
    def testDefaults(self):
        tool = Command("tool")
        self.assertEqual(tool.name, "tool")
        self.assertEqual(tool.aliases, ())
        self.assertIsNone(tool.descr)
        self.assertIsNone(tool.version)
        self.assertIsNone(tool.parent)
        self.assertIsNone(tool.execute)
        self.assertIsNone(tool.after_parse)
        self.assertEqual(dict(tool.children), {})
        self.assertIs(tool.root, tool)

    def testNameValidation(self):
        with self.assertRaises(ValueError):
            Command("")
        with self.assertRaises(ValueError):
            Command("two words")
        with self.assertRaises(TypeError):
            Command("tool", aliases="t")

    def testDuplicateOptionNamesRejected(self):
        with self.assertRaises(ValueError):
            Command("tool", options=[Boolean("verbose"), String("verbose")])

    def testShortNameCollisionsRejected(self):
        with self.assertRaises(ValueError):
            Command("tool", options=[Boolean("verbose", "v"), Boolean("version", "v")])
        with self.assertRaises(ValueError):
            Command("tool", options=[Boolean("v"), Boolean("verbose", "v")])

    def testDuplicateArgumentNamesRejected(self):
        with self.assertRaises(ValueError):
            Command("tool", arguments=[String("file"), String("file")])

    def testArgumentsCannotHaveShortNames(self):
        with self.assertRaises(ValueError):
            Command("tool", arguments=[String("file", "f")])

    def testSpecsMustBeArguments(self):
        with self.assertRaises(TypeError):
            Command("tool", options=["--verbose"])

    def testHandlersMustBeCallable(self):
        with self.assertRaises(TypeError):
            Command("tool", execute="run")

    def testDeclarationsAreReadOnly(self):
        tool = Command("tool", options=[Boolean("verbose")])
        self.assertIsInstance(tool.options, tuple)
        with self.assertRaises(TypeError):
            tool.children["other"] = Command("other")


class CommandTreeTest(TestCase):
    def setUp(self):
        self.tool = Command("tool")
        self.deploy = Command("deploy", aliases=("dp",), parent=self.tool)
        self.preview = Command("preview", parent=self.deploy)

    def testHierarchy(self):
        self.assertIs(self.tool.children["deploy"], self.deploy)
        self.assertIs(self.deploy.parent, self.tool)
        self.assertIs(self.preview.root, self.tool)
        self.assertEqual(self.preview.path, (self.tool, self.deploy, self.preview))

    def testChildLookupByNameOrAlias(self):
        self.assertIs(self.tool.child("deploy"), self.deploy)
        self.assertIs(self.tool.child("dp"), self.deploy)
        self.assertIsNone(self.tool.child("dpl"))
        self.assertIsNone(self.tool.child("preview"))

    def testSiblingNamesAndAliasesAreUnique(self):
        with self.assertRaises(ValueError):
            Command("deploy", parent=self.tool)
        with self.assertRaises(ValueError):
            Command("dp", parent=self.tool)
        with self.assertRaises(ValueError):
            Command("ship", aliases=("deploy",), parent=self.tool)

    def testMountingTwiceElsewhereRejected(self):
        other = Command("other")
        with self.assertRaises(ValueError):
            other.command(self.deploy)

    def testMountExistingCommand(self):
        build = Command("build")
        self.assertIs(self.tool.command(build), build)
        self.assertIs(build.parent, self.tool)

    def testCommandsParameterMountsChildren(self):
        build = Command("build")
        tool = Command("tool", commands=[build])
        self.assertIs(tool.child("build"), build)


class CommandScopeTest(TestCase):
    def setUp(self):
        self.tool = Command("tool", options=[Boolean("version", "v"), String("profile", "p")])

    def testChildShortCollidesWithRootShort(self):
        with self.assertRaises(ValueError):
            Command("build", options=[Boolean("verbose", "v")], parent=self.tool)
        self.assertIsNone(self.tool.child("build"))

    def testChildShortCollidesWithRootName(self):
        with self.assertRaises(ValueError):
            Command("build", options=[Boolean("verbose", "version")], parent=self.tool)

    def testChildNameCollidesWithRootShort(self):
        with self.assertRaises(ValueError):
            Command("build", options=[Boolean("p")], parent=self.tool)

    def testNestedCommandsAreChecked(self):
        deploy = Command("deploy", parent=self.tool)
        with self.assertRaises(ValueError):
            Command("preview", options=[String("plan", "p")], parent=deploy)

    def testSubtreeIsCheckedWhenMounted(self):
        deploy = Command("deploy")
        Command("preview", options=[String("plan", "p")], parent=deploy)
        with self.assertRaises(ValueError):
            self.tool.command(deploy)
        with self.assertRaises(ValueError):
            Command("tool", options=[Boolean("verbose", "v")], commands=[Command("run", options=[Boolean("v")])])

    def testLongNameShadowingIsAllowed(self):
        build = Command("build", options=[Boolean("version", "r")], parent=self.tool)
        self.assertIs(self.tool.child("build"), build)


class CommandDecoratorTest(TestCase):
    def testBareDecoratorUsesFunctionNameAndDocstring(self):
        @command
        def tool(context):
            """Build things."""

        self.assertIsInstance(tool, Command)
        self.assertEqual(tool.name, "tool")
        self.assertEqual(tool.descr, "Build things.")
        self.assertTrue(callable(tool.execute))

    def testNamedDecorator(self):
        @command("my-tool", options=[Boolean("verbose")], version="2.0.0")
        def main(context):
            pass

        self.assertEqual(main.name, "my-tool")
        self.assertEqual(main.version, "2.0.0")
        self.assertEqual([option.name for option in main.options], ["verbose"])

    def testChildDecorators(self):
        @command
        def tool(context):
            pass

        @tool.command
        def build(context):
            pass

        @tool.command("ship", aliases=("s",), options=[Array("tag")])
        def deploy(context):
            pass

        self.assertIs(tool.child("build"), build)
        self.assertIs(tool.child("s"), deploy)
        self.assertEqual(deploy.name, "ship")

    def testRejectsInvalidSource(self):
        with self.assertRaises(TypeError):
            command(42)
        with self.assertRaises(TypeError):
            command("tool")("not callable")


class FoundCommandTest(TestCase):
    def testDelegatesToNode(self):
        tool = Command("tool", options=[Boolean("verbose")])
        build = Command("build", descr="Build things.", parent=tool)
        found = FoundCommand(build, "tool build", tool.options, tool)
        self.assertEqual(found.name, "build")
        self.assertEqual(found.descr, "Build things.")
        self.assertEqual(found.full_name, "tool build")
        self.assertFalse(found.is_root)
        self.assertTrue(FoundCommand(tool, "tool", (), tool).is_root)

    def testUnknownAttributeRaises(self):
        tool = Command("tool")
        found = FoundCommand(tool, "tool", (), tool)
        with self.assertRaises(AttributeError):
            found.nothing


class ContextTest(TestCase):
    def testFreshMappings(self):
        tool = Command("tool")
        context = Context(FoundCommand(tool, "tool", (), tool))
        self.assertEqual(context.option_values, {})
        self.assertEqual(context.global_option_values, {})
        self.assertEqual(context.argument_values, [])
        self.assertEqual(context.telemetry_properties, {})
        self.assertEqual(context.snapshot(), {
            "option_values": {},
            "global_option_values": {},
            "argument_values": [],
        })
        self.assertIn("'tool'", repr(context))


if __name__ == "__main__":
    unittest.main()
