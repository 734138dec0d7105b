#!/usr/bin/env python3
"""
Main test runner for the dp front end.

Runs a quick lex/parse/format smoke test and then the unittest suites
under tests/.

Author: xwest
"""

import sys
import os
import unittest

# Add the project root to the Python path
project_root = os.path.abspath(os.path.dirname(__file__))
sys.path.insert(0, project_root)

SMOKE_SOURCE = (
    "import {\"example.org/x\" (Foo)}\n"
    "\n"
    "pub   main( a,b int )int{\n"
    "    x := a+b*2\n"
    "    return x\n"
    "}\n"
)

SMOKE_EXPECTED = (
    "import {\n"
    "\t\"example.org/x\" (Foo)\n"
    "}\n"
    "\n"
    "pub main(a, b int) int {\n"
    "\tx := a + b*2\n"
    "\treturn x\n"
    "}\n"
)


def run_smoke_test(code: str = SMOKE_SOURCE, expected: str = SMOKE_EXPECTED) -> bool:
    """Push a small program through the whole pipeline."""

    print("dp Front End Test Suite")
    print("=" * 60)

    try:
        from dp.lexer import tokenize, Position
        from dp.lexer.errors import PositionError
        from dp.parser import parse
        from dp.formatter import format_file

        print("✅ All modules imported successfully")
        print()

    except ImportError as e:
        print(f"❌ Failed to import dp modules: {e}")
        return False

    print("Testing the format pipeline...")

    try:
        print("  🔧 Lexing...")
        tokens = tokenize(Position.location("smoke.dp"), code)
        print(f"     Generated {len(tokens)} tokens")

        print("  🔧 Parsing...")
        nodes = parse(tokens)
        print(f"     Generated {len(nodes)} top-level nodes")

        print("  🔧 Formatting...")
        output = format_file(nodes).decode("utf-8")

        if output != expected:
            print("     ❌ Unexpected output:")
            print(output)
            return False

        again = format_file(parse(tokenize(Position.location("smoke.dp"), output)))
        if again.decode("utf-8") != output:
            print("     ❌ Formatting is not idempotent")
            return False

        print("     ✅ Output is canonical and stable")
        print()

    except PositionError as e:
        print(f"❌ Pipeline test FAILED: {e}")
        return False

    return True


def run_all_tests() -> bool:
    """Run the smoke test and every suite under tests/."""
    if not run_smoke_test():
        return False

    loader = unittest.TestLoader()
    suite = loader.discover(os.path.join(project_root, "tests"), pattern="test_*.py")

    result = unittest.TextTestRunner(verbosity=2).run(suite)

    print()
    print("=" * 60)
    if result.wasSuccessful():
        print(f"🎉 All {result.testsRun} tests PASSED!")
    else:
        print(f"❌ {len(result.failures)} failures, {len(result.errors)} errors")
    print("=" * 60)

    return result.wasSuccessful()


if __name__ == "__main__":
    success = run_all_tests()
    sys.exit(0 if success else 1)
