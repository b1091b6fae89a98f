"""
Structural helpers of the canonicalization engine.

These helpers operate on lists of boxed operands and never build function
nodes themselves, so that they can be shared by the function node and the
library canonical handlers.
"""

from typing import Callable, List, Optional, Set

from .patterns import is_wildcard


def flatten_sequence(ops: List) -> List:
    """Splice the operands of Sequence operands into the list."""
    result = []
    for op in ops:
        if op.head == 'Sequence' and op.ops is not None:
            result.extend(flatten_sequence(list(op.ops)))
        else:
            result.append(op)
    return result


def flatten_ops(ops: List, head: str) -> List:
    """
    Merge the operands of nested `head` applications into a single list.

    Used for associative heads, which also drop Nothing operands.
    """
    result = []
    for op in ops:
        if op.symbol == 'Nothing':
            continue
        if op.head == head and op.ops is not None:
            result.extend(flatten_ops(list(op.ops), head))
        elif op.head == 'Sequence' and op.ops is not None:
            result.extend(flatten_ops(list(op.ops), head))
        else:
            result.append(op)
    return result


def held_positions(hold: str, count: int) -> Set[int]:
    """Indices of the operands exempt from evaluation under a hold policy."""
    if count == 0 or hold == 'none':
        return set()
    if hold == 'all':
        return set(range(count))
    if hold == 'first':
        return {0}
    if hold == 'rest':
        return set(range(1, count))
    if hold == 'last':
        return {count - 1}
    if hold == 'most':
        return set(range(count - 1))
    raise ValueError(f"Unknown hold policy: {hold}")


def hold_map(ops, hold: str, fn: Callable) -> List:
    """Apply `fn` to the operands that are not held."""
    held = held_positions(hold, len(ops))
    return [op if i in held else fn(op) for i, op in enumerate(ops)]


# ============================================================
# Signature validation
# ============================================================

def _check(ce, op, dom):
    """Return `op`, or an error marker if its domain is incompatible with `dom`."""
    if not op.is_valid or is_wildcard(op.symbol):
        return op
    if dom.name == 'Anything' or op.head == 'Sequence':
        return op
    actual = op.domain
    if actual.is_compatible(dom, 'bivariant'):
        return op
    return ce.error(['ErrorCode', "'incompatible-domain'", dom.json, actual.json])


def validate_signature(ce, definition, ops: List) -> Optional[List]:
    """
    Check operands against the domain of a function definition.

    Returns None when the operands are valid, otherwise a new operand list
    where missing operands, extra operands and operands of incompatible
    domain are replaced by error markers.
    """
    params = definition.signature.domain.domain_args[:-1]
    result = []
    valid = True
    i = 0
    for param in params:
        if param.ctor == 'Sequence':
            inner = param.domain_args[0]
            while i < len(ops):
                checked = _check(ce, ops[i], inner)
                valid = valid and checked is ops[i]
                result.append(checked)
                i += 1
            break
        if param.ctor == 'Maybe':
            if i < len(ops):
                checked = _check(ce, ops[i], param.domain_args[0])
                valid = valid and checked is ops[i]
                result.append(checked)
                i += 1
            continue
        if i >= len(ops):
            result.append(ce.error(['ErrorCode', "'missing'", param.json]))
            valid = False
            continue
        checked = _check(ce, ops[i], param)
        valid = valid and checked is ops[i]
        result.append(checked)
        i += 1

    for extra in ops[i:]:
        result.append(ce.error("'unexpected-argument'", extra))
        valid = False

    return None if valid else result
