#!/usr/bin/env python3
"""
BOXMATH Feature Demonstration

This script demonstrates the major features of the BOXMATH library.
"""

from boxmath import ComputeEngine, RewriteTrace

from custom_library import LIBRARY


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_parsing():
    """Demonstrate LaTeX parsing and serialization."""
    section("Parsing and Serialization")

    ce = ComputeEngine()
    examples = [
        r"\frac{\pi}{2}",
        r"2x^2+3x-1",
        r"\sin^{-1} x",
        r"\sum_{i=1}^{10} i^2",
        r"\begin{cases}x & x>0\\-x & \text{otherwise}\end{cases}",
        r"\frac{1}{",
    ]

    for latex in examples:
        expr = ce.parse(latex)
        print(f"  {latex}")
        print(f"    json:  {expr.json}")
        print(f"    latex: {expr.latex}")


def demo_canonical():
    """Demonstrate canonical forms."""
    section("Canonical Forms")

    ce = ComputeEngine()
    examples = [
        ['Add', 'x', ['Add', 'y', 0]],
        ['Multiply', 'y', 2, 'x', 3],
        ['Divide', ['Negate', 'x'], ['Negate', 'n']],
        ['Sqrt', 12],
        ['Power', 'ExponentialE', 'x'],
        ['Log', 'x', 10],
        ['Add', 1, "'hello'"],
    ]

    for json in examples:
        expr = ce.box(json, canonical=True)
        print(f"  {json} => {expr.json}")


def demo_simplify():
    """Demonstrate simplification with a trace."""
    section("Simplification")

    ce = ComputeEngine()
    examples = [
        r"7+2+5",
        r"x+x+3x",
        r"\sqrt{x^2}",
        r"\sin^2 x+\cos^2 x",
        r"\cos\frac{\pi}{3}",
    ]

    for latex in examples:
        trace = RewriteTrace()
        result = ce.parse(latex).simplify(trace=trace)
        print(f"  {latex} => {result.latex}")
        if trace:
            print(f"    rules: {trace.format('rules')}")


def demo_numeric():
    """Demonstrate numeric evaluation in each mode."""
    section("Numeric Evaluation")

    for mode, precision in [('machine', 'machine'), ('bignum', 50), ('auto', 30)]:
        ce = ComputeEngine(numeric_mode=mode, precision=precision)
        print(f"  [{mode}, precision={ce.precision}]")
        for latex in [r"\pi", r"\sqrt{2}", r"\sqrt{-4}", r"e^{1}"]:
            print(f"    {latex:10} => {ce.parse(latex).N().json}")


def demo_rules():
    """Demonstrate custom rules and priorities."""
    section("Rules")

    ce = ComputeEngine()
    rules = ce.rules([
        {'name': 'double', 'lhs': ['Double', '_x'], 'rhs': ['Add', '_x', '_x']},
        {'name': 'square-of-f', 'lhs': ['Square', ['f', '_x']], 'rhs': ['g', '_x'], 'priority': 10},
        {'name': 'positive-only', 'lhs': ['h', '_x'], 'rhs': '_x',
         'condition': lambda bindings, ce: bindings['_x'].is_positive},
    ])
    print(f"  Rules: {rules.names()}")

    examples = [
        ['Double', ['Double', 'y']],
        ['Square', ['f', 'y']],
        ['h', 3],
        ['h', -3],
    ]

    for json in examples:
        trace = RewriteTrace()
        result = ce.box(json).replace(rules, iteration_limit=4, trace=trace)
        shown = result.json if result is not None else '(no match)'
        print(f"  {json} => {shown}")
        if trace:
            print(f"    {trace.format('compact')}")


def demo_assumptions():
    """Demonstrate assumptions."""
    section("Assumptions")

    ce = ComputeEngine()
    x = ce.box('x')
    print(f"  x > 0?           {x.is_positive}")
    ce.assume(r"x>0")
    print(f"  after assume:    {x.is_positive}")
    print(f"  sgn(2x):         {ce.box(['Multiply', 2, 'x'], canonical=True).sgn}")
    ce.forget('x')
    print(f"  after forget:    {x.is_positive}")


def demo_library():
    """Demonstrate a custom library."""
    section("Custom Library")

    ce = ComputeEngine(libraries=[LIBRARY])
    examples = [
        ['Gcd', 12, 8],
        ['Lcm', 4, 6],
        ['Mod', 17, 5],
        ['Cube', 3],
        ['Average', 1, ['Rational', 1, 2]],
        ['Multiply', 2, 'g_0'],
    ]

    for json in examples:
        print(f"  {json} => {ce.box(json).evaluate().json}")


def main():
    """Run all demonstrations."""
    print("BOXMATH - Boxed MathJSON expressions with LaTeX parsing")
    print("Feature Demonstration")

    demo_parsing()
    demo_canonical()
    demo_simplify()
    demo_numeric()
    demo_rules()
    demo_assumptions()
    demo_library()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
