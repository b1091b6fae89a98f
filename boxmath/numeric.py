"""
Numeric kinds used by boxed numbers.

Four representations are supported, exactly one of which backs a number:

    rational  - fractions.Fraction (integers are rationals with denominator 1)
    machine   - float
    bignum    - mpmath.mpf, evaluated at the engine precision
    complex   - complex or mpmath.mpc

The helpers in this module promote operands to a common kind before
operating on them, in the order rational < machine < bignum < complex.
"""

from typing import Any, Callable, Dict, Optional, Tuple, Union
from fractions import Fraction
import cmath
import math
import re

import mpmath

RATIONAL = 'rational'
MACHINE = 'machine'
BIGNUM = 'bignum'
COMPLEX = 'complex'

KIND_RANK = {RATIONAL: 0, MACHINE: 1, BIGNUM: 2, COMPLEX: 3}

# Number of significant digits a machine float can hold without loss
MACHINE_PRECISION = 15

NumberType = Union[Fraction, float, complex, Any]

_INTEGER_RE = re.compile(r'^[+-]?\d+$')
_DECIMAL_RE = re.compile(r'^[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?$')


# ============================================================
# Classification
# ============================================================

def normalize(value: Any) -> NumberType:
    """Coerce a Python or mpmath number to one of the four representations."""
    if isinstance(value, bool):
        return Fraction(int(value))
    if isinstance(value, int):
        return Fraction(value)
    if isinstance(value, (Fraction, float, complex)):
        return value
    if isinstance(value, (mpmath.mpf, mpmath.mpc)):
        return value
    raise TypeError(f"Unsupported numeric value: {value!r}")


def number_kind(value: NumberType) -> str:
    if isinstance(value, Fraction):
        return RATIONAL
    if isinstance(value, float):
        return MACHINE
    if isinstance(value, mpmath.mpf):
        return BIGNUM
    if isinstance(value, (complex, mpmath.mpc)):
        return COMPLEX
    raise TypeError(f"Unsupported numeric value: {value!r}")


def is_exact(value: NumberType) -> bool:
    return isinstance(value, Fraction)


def is_integer_value(value: NumberType) -> bool:
    """True for exact integers and for finite inexact reals with no fraction part."""
    if isinstance(value, Fraction):
        return value.denominator == 1
    if isinstance(value, float):
        return math.isfinite(value) and value.is_integer()
    if isinstance(value, mpmath.mpf):
        return bool(mpmath.isfinite(value)) and bool(mpmath.isint(value))
    return False


def is_nan(value: NumberType) -> bool:
    if isinstance(value, Fraction):
        return False
    if isinstance(value, float):
        return math.isnan(value)
    if isinstance(value, complex):
        return cmath.isnan(value)
    return bool(mpmath.isnan(value))


def is_infinite(value: NumberType) -> bool:
    if isinstance(value, Fraction):
        return False
    if isinstance(value, float):
        return math.isinf(value)
    if isinstance(value, complex):
        return cmath.isinf(value)
    return bool(mpmath.isinf(value))


def is_zero(value: NumberType) -> bool:
    if is_nan(value):
        return False
    return value == 0


def sign(value: NumberType) -> Optional[int]:
    """Sign of a real value, None for NaN and non-real complex values."""
    if is_nan(value):
        return None
    if isinstance(value, (complex, mpmath.mpc)):
        if value.imag != 0:
            return None
        value = value.real
    if value > 0:
        return 1
    if value < 0:
        return -1
    return 0


# ============================================================
# Conversions
# ============================================================

def to_float(value: NumberType) -> Optional[float]:
    """Machine float for a real value, None when the value is not real."""
    if isinstance(value, (complex, mpmath.mpc)):
        if value.imag != 0:
            return None
        value = value.real
    try:
        return float(value)
    except OverflowError:
        return math.inf if value > 0 else -math.inf


def to_bignum(value: NumberType):
    """mpf for a real value at the current mpmath precision."""
    if isinstance(value, Fraction):
        return mpmath.mpf(value.numerator) / value.denominator
    if isinstance(value, (complex, mpmath.mpc)):
        return mpmath.mpf(value.real)
    return mpmath.mpf(value)


def to_complex(value: NumberType, bignum: bool = False):
    if bignum:
        if isinstance(value, (complex, mpmath.mpc)):
            return mpmath.mpc(value)
        return mpmath.mpc(to_bignum(value), 0)
    if isinstance(value, mpmath.mpc):
        return complex(value)
    if isinstance(value, complex):
        return value
    return complex(to_float(value), 0.0)


def real_part(value: NumberType) -> NumberType:
    """Drop the imaginary part of a complex value, keeping its precision."""
    if isinstance(value, mpmath.mpc):
        return mpmath.mpf(value.real)
    if isinstance(value, complex):
        return value.real
    return value


def as_small_integer(value: NumberType) -> Optional[int]:
    """Python int when the value is an integer of reasonable magnitude."""
    if isinstance(value, (complex, mpmath.mpc)):
        return None
    if not is_integer_value(value):
        return None
    result = int(value)
    if abs(result) > 2 ** 53:
        return None
    return result


def rationalize(value: NumberType) -> Optional[Fraction]:
    """Exact rational value of a rational or an integer-valued float."""
    if isinstance(value, Fraction):
        return value
    if isinstance(value, (float, mpmath.mpf)) and is_integer_value(value):
        return Fraction(int(value))
    return None


# ============================================================
# Arithmetic
# ============================================================

def _promote(a: NumberType, b: NumberType) -> Tuple[NumberType, NumberType]:
    ka, kb = number_kind(a), number_kind(b)
    if ka == kb and ka != COMPLEX:
        return a, b
    if COMPLEX in (ka, kb):
        use_big = any(isinstance(x, (mpmath.mpf, mpmath.mpc)) for x in (a, b))
        return to_complex(a, use_big), to_complex(b, use_big)
    if BIGNUM in (ka, kb):
        return to_bignum(a), to_bignum(b)
    return to_float(a), to_float(b)


def add(a: NumberType, b: NumberType) -> NumberType:
    a, b = _promote(a, b)
    return a + b


def mul(a: NumberType, b: NumberType) -> NumberType:
    a, b = _promote(a, b)
    return a * b


def neg(a: NumberType) -> NumberType:
    return -a


def div(a: NumberType, b: NumberType) -> NumberType:
    if is_zero(b):
        return math.nan
    a, b = _promote(a, b)
    return a / b


def power(base: NumberType, exponent: NumberType) -> NumberType:
    """Raise base to exponent, exact when both are exact and the exponent is an integer."""
    if isinstance(base, Fraction) and isinstance(exponent, Fraction):
        if exponent.denominator == 1:
            if base == 0 and exponent < 0:
                return math.nan
            return base ** exponent.numerator
        base, exponent = float(base), float(exponent)
    base, exponent = _promote(base, exponent)
    try:
        if isinstance(base, mpmath.mpf) or isinstance(base, mpmath.mpc):
            return mpmath.power(base, exponent)
        return base ** exponent
    except (ZeroDivisionError, OverflowError, ValueError):
        return math.nan


def compare(a: NumberType, b: NumberType) -> Optional[int]:
    """-1, 0 or 1 comparing two real values, None when either is not real."""
    if is_nan(a) or is_nan(b):
        return None
    if isinstance(a, (complex, mpmath.mpc)) or isinstance(b, (complex, mpmath.mpc)):
        if a == b:
            return 0
        return None
    a, b = _promote(a, b)
    if a < b:
        return -1
    if a > b:
        return 1
    return 0


def chop(value: NumberType, tolerance: float) -> NumberType:
    """Replace values (or complex parts) closer to zero than tolerance by exact zero."""
    if isinstance(value, Fraction) or is_nan(value):
        return value
    if isinstance(value, (complex, mpmath.mpc)):
        re_part = chop(value.real, tolerance)
        im_part = chop(value.imag, tolerance)
        if is_zero(im_part):
            return re_part if not is_zero(re_part) else Fraction(0)
        if isinstance(value, mpmath.mpc):
            return mpmath.mpc(re_part, im_part)
        return complex(float(re_part), float(im_part))
    if abs(value) < tolerance:
        return Fraction(0)
    return value


# ============================================================
# Exact helpers
# ============================================================

def factor_perfect_square(n: int) -> Tuple[int, int]:
    """
    Split a non-negative integer as n = a**2 * b with b as small as found.

    Trial division is bounded, so very large factors are left in b.

    Examples:
        factor_perfect_square(12)   # => (2, 3)
        factor_perfect_square(5040) # => (12, 35)
    """
    if n < 4:
        return 1, n
    root = math.isqrt(n)
    if root * root == n:
        return root, 1
    outside, inside = 1, 1
    remaining = n
    p = 2
    while p * p <= remaining and p < 100000:
        count = 0
        while remaining % p == 0:
            remaining //= p
            count += 1
        outside *= p ** (count // 2)
        inside *= p ** (count % 2)
        p += 1 if p == 2 else 2
    root = math.isqrt(remaining)
    if root * root == remaining:
        outside *= root
    else:
        inside *= remaining
    return outside, inside


def exact_root(n: int, k: int) -> Optional[int]:
    """Integer k-th root of a non-negative integer, None if n is not a perfect power."""
    if n < 0 or k < 1:
        return None
    if k == 1:
        return n
    if k == 2:
        root = math.isqrt(n)
        return root if root * root == n else None
    try:
        guess = int(round(n ** (1.0 / k)))
    except OverflowError:
        return None
    for candidate in (guess - 1, guess, guess + 1):
        if candidate >= 0 and candidate ** k == n:
            return candidate
    return None


# ============================================================
# Transcendental functions
# ============================================================

# name -> (machine real, machine complex, mpmath)
_FUNCTIONS: Dict[str, Tuple[Optional[Callable], Optional[Callable], Callable]] = {
    'sin': (math.sin, cmath.sin, mpmath.sin),
    'cos': (math.cos, cmath.cos, mpmath.cos),
    'tan': (math.tan, cmath.tan, mpmath.tan),
    'cot': (lambda x: 1 / math.tan(x), lambda z: 1 / cmath.tan(z), mpmath.cot),
    'sec': (lambda x: 1 / math.cos(x), lambda z: 1 / cmath.cos(z), mpmath.sec),
    'csc': (lambda x: 1 / math.sin(x), lambda z: 1 / cmath.sin(z), mpmath.csc),
    'asin': (math.asin, cmath.asin, mpmath.asin),
    'acos': (math.acos, cmath.acos, mpmath.acos),
    'atan': (math.atan, cmath.atan, mpmath.atan),
    'sinh': (math.sinh, cmath.sinh, mpmath.sinh),
    'cosh': (math.cosh, cmath.cosh, mpmath.cosh),
    'tanh': (math.tanh, cmath.tanh, mpmath.tanh),
    'asinh': (math.asinh, cmath.asinh, mpmath.asinh),
    'acosh': (math.acosh, cmath.acosh, mpmath.acosh),
    'atanh': (math.atanh, cmath.atanh, mpmath.atanh),
    'exp': (math.exp, cmath.exp, mpmath.exp),
    'ln': (math.log, cmath.log, mpmath.log),
    'sqrt': (math.sqrt, cmath.sqrt, mpmath.sqrt),
    'gamma': (math.gamma, None, mpmath.gamma),
}


def apply_function(name: str, value: NumberType, bignum: bool) -> NumberType:
    """
    Evaluate a named transcendental function numerically.

    Args:
        name: One of the keys of the function table ('sin', 'ln', ...).
        value: Argument, of any numeric kind.
        bignum: Evaluate with mpmath at the current precision instead of
            machine floats.

    Returns:
        The numeric result. Arguments outside the real domain of the
        function produce complex results; singularities produce NaN.
    """
    if name not in _FUNCTIONS:
        raise KeyError(f"Unknown numeric function: {name}")
    real_fn, complex_fn, big_fn = _FUNCTIONS[name]
    try:
        if bignum or isinstance(value, (mpmath.mpf, mpmath.mpc)):
            if not isinstance(value, mpmath.mpc):
                value = to_bignum(value)
            return big_fn(value)
        if isinstance(value, complex):
            if complex_fn is None:
                return math.nan
            return complex_fn(value)
        x = to_float(value)
        try:
            return real_fn(x)
        except ValueError:
            if complex_fn is None:
                return math.nan
            return complex_fn(complex(x, 0.0))
    except (ValueError, ZeroDivisionError, OverflowError):
        return math.nan


def pi(bignum: bool):
    return +mpmath.mp.pi if bignum else math.pi


def e(bignum: bool):
    return +mpmath.mp.e if bignum else math.e


# ============================================================
# Text and MathJSON
# ============================================================

def parse_number_string(text: str) -> NumberType:
    """
    Parse the textual form of a number.

    Integers are exact. Decimals become machine floats when they fit in
    MACHINE_PRECISION significant digits, bignums otherwise.
    """
    text = text.strip()
    if text in ('NaN', '+NaN', '-NaN'):
        return math.nan
    if text in ('Infinity', '+Infinity', 'PositiveInfinity'):
        return math.inf
    if text in ('-Infinity', 'NegativeInfinity'):
        return -math.inf
    if _INTEGER_RE.match(text):
        return Fraction(int(text))
    if not _DECIMAL_RE.match(text):
        raise ValueError(f"Invalid number: {text}")
    mantissa = re.split('[eE]', text)[0]
    digits = mantissa.lstrip('+-').replace('.', '').lstrip('0')
    if len(digits) <= MACHINE_PRECISION:
        value = float(text)
        if math.isfinite(value):
            return value
    return mpmath.mpf(text)


def _format_real(value: NumberType) -> Any:
    if isinstance(value, Fraction):
        if value.denominator == 1:
            return value.numerator
        return ['Rational', value.numerator, value.denominator]
    if is_nan(value):
        return {'num': 'NaN'}
    if is_infinite(value):
        return {'num': '+Infinity' if value > 0 else '-Infinity'}
    if isinstance(value, float):
        return value
    return {'num': mpmath.nstr(value, mpmath.mp.dps)}


def format_number(value: NumberType) -> Any:
    """MathJSON for a numeric value."""
    if isinstance(value, (complex, mpmath.mpc)):
        if isinstance(value, complex) and cmath.isnan(value):
            return {'num': 'NaN'}
        return ['Complex', _format_real(real_part(value)), _format_real(value.imag)]
    return _format_real(value)
