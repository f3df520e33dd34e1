"""Builtin functions and constants.

Every function is described by a :class:`FunctionSpec`: an arity rule, an
optional domain check and the computation itself. The table is built once
at import time and exposed read-only.

Angles are in degrees: ``sin``/``cos``/``tan`` take degrees and the inverse
functions return degrees.
"""

import math
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from stepcalc.errors import DomainError, UnknownFunction, WrongArity

CONSTANTS: Mapping[str, float] = MappingProxyType({
    'pi': math.pi,
    'e': math.e,
})


@dataclass(frozen=True)
class FunctionSpec:
    """Arity, domain and computation of a builtin function.

    ``max_args`` of None means the function is variadic. ``check`` raises
    :class:`DomainError` for arguments outside the domain.
    """
    name: str
    min_args: int
    max_args: Optional[int]
    compute: Callable[..., float]
    check: Optional[Callable[..., None]] = None
    arity_message: str = ""
    summary: str = ""

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args


_FUNCTIONS: Dict[str, FunctionSpec] = {}


def _register(spec: FunctionSpec, *aliases: str) -> None:
    for name in (spec.name,) + aliases:
        _FUNCTIONS[name] = spec


# --------------------------
# Numeric helpers
# --------------------------

def _is_integral(x: float) -> bool:
    return float(x).is_integer()


def _inf_on_overflow(func: Callable[[float], float], odd: bool = False) -> Callable[[float], float]:
    """Wrap ``func`` so overflow yields infinity instead of OverflowError.

    With ``odd`` the infinity takes the sign of the argument.
    """
    def wrapper(x: float) -> float:
        try:
            return func(x)
        except OverflowError:
            return math.copysign(math.inf, x) if odd else math.inf
    return wrapper


def _trig_degrees(func: Callable[[float], float]) -> Callable[[float], float]:
    """Apply ``func`` to an angle in degrees; infinite angles give NaN."""
    def wrapper(x: float) -> float:
        if math.isinf(x):
            return math.nan
        return func(math.radians(x))
    return wrapper


def _round_half_away(x: float) -> float:
    if not math.isfinite(x):
        return x
    return math.copysign(math.floor(abs(x) + 0.5), x)


def _floor(x: float) -> float:
    return float(math.floor(x)) if math.isfinite(x) else x


def _ceil(x: float) -> float:
    return float(math.ceil(x)) if math.isfinite(x) else x


def _factorial(x: float) -> float:
    result = 1.0
    for i in range(1, int(x) + 1):
        result *= i
        if result == math.inf:
            break
    return result


def _permutations(n: float, k: float) -> float:
    n, k = int(n), int(k)
    result = 1.0
    for i in range(k):
        result *= n - i
        if result == math.inf:
            break
    return result


def _combinations(n: float, k: float) -> float:
    n, k = int(n), int(k)
    # Multiplying by the smaller of k and n-k keeps intermediates small.
    k = min(k, n - k)
    result = 1.0
    for i in range(k):
        result *= (n - i) / (i + 1)
        if result == math.inf:
            break
    return result


def _mean(*values: float) -> float:
    return sum(values) / len(values)


def _median(*values: float) -> float:
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[mid - 1] + ordered[mid]) / 2.0
    return ordered[mid]


def _sample_stdev(*values: float) -> float:
    mean = _mean(*values)
    variance = sum((x - mean) * (x - mean) for x in values) / (len(values) - 1)
    return math.sqrt(variance)


# --------------------------
# Domain checks
# --------------------------

def _unit_interval(name: str) -> Callable[[float], None]:
    def check(x: float) -> None:
        if x < -1.0 or x > 1.0:
            raise DomainError(name, f"{name} domain: [-1, 1]")
    return check


def _positive(name: str) -> Callable[[float], None]:
    def check(x: float) -> None:
        if x <= 0.0:
            raise DomainError(name, f"{name} domain: positive numbers")
    return check


def _check_sqrt(x: float) -> None:
    if x < 0.0:
        raise DomainError('sqrt', "sqrt domain: non-negative numbers")


def _check_acosh(x: float) -> None:
    if x < 1.0:
        raise DomainError('acosh', "acosh domain: x >= 1")


def _check_atanh(x: float) -> None:
    if x <= -1.0 or x >= 1.0:
        raise DomainError('atanh', "atanh domain: |x| < 1")


def _check_factorial(x: float) -> None:
    if x < 0.0:
        raise DomainError('fact', "Factorial not defined for negative numbers")
    if not _is_integral(x):
        raise DomainError('fact', "Factorial requires integer argument")


def _selection_check(name: str) -> Callable[[float, float], None]:
    """Domain of perm/comb: non-negative integers with k <= n."""
    def check(n: float, k: float) -> None:
        if n < 0.0 or k < 0.0:
            raise DomainError(name, f"{name} requires non-negative integers")
        if not (_is_integral(n) and _is_integral(k)):
            raise DomainError(name, f"{name} requires integer arguments")
        if k > n:
            raise DomainError(name, f"k cannot be greater than n in {name}")
    return check


# --------------------------
# Registration
# --------------------------

def _unary(name: str, compute: Callable[[float], float], summary: str,
           check: Optional[Callable[[float], None]] = None) -> FunctionSpec:
    return FunctionSpec(
        name, 1, 1, compute, check,
        arity_message=f"{name} requires exactly one argument",
        summary=summary,
    )


# Trigonometric
_register(_unary('sin', _trig_degrees(math.sin), "Sine (x in degrees)"))
_register(_unary('cos', _trig_degrees(math.cos), "Cosine (x in degrees)"))
_register(_unary('tan', _trig_degrees(math.tan), "Tangent (x in degrees)"))
_register(_unary('asin', lambda x: math.degrees(math.asin(x)),
                 "Arc sine (result in degrees)", _unit_interval('asin')))
_register(_unary('acos', lambda x: math.degrees(math.acos(x)),
                 "Arc cosine (result in degrees)", _unit_interval('acos')))
_register(_unary('atan', lambda x: math.degrees(math.atan(x)), "Arc tangent (result in degrees)"))

# Exponential
_register(_unary('ln', math.log, "Natural logarithm", _positive('ln')))
_register(_unary('log', math.log10, "Base-10 logarithm", _positive('log')))
_register(_unary('exp', _inf_on_overflow(math.exp), "Exponential function"))

# Basic
_register(_unary('abs', abs, "Absolute value"))
_register(_unary('floor', _floor, "Round down to nearest integer"))
_register(_unary('ceil', _ceil, "Round up to nearest integer"))
_register(_unary('round', _round_half_away, "Round to nearest integer"))
_register(_unary('sqrt', math.sqrt, "Square root", _check_sqrt))

# Hyperbolic
_register(_unary('sinh', _inf_on_overflow(math.sinh, odd=True), "Hyperbolic sine"))
_register(_unary('cosh', _inf_on_overflow(math.cosh), "Hyperbolic cosine"))
_register(_unary('tanh', math.tanh, "Hyperbolic tangent"))
_register(_unary('asinh', math.asinh, "Inverse hyperbolic sine"))
_register(_unary('acosh', math.acosh, "Inverse hyperbolic cosine (x >= 1)", _check_acosh))
_register(_unary('atanh', math.atanh, "Inverse hyperbolic tangent (|x| < 1)", _check_atanh))

# Combinatorics
_register(_unary('fact', _factorial, "Factorial (n integer >= 0)", _check_factorial), 'factorial')
_register(FunctionSpec(
    'perm', 2, 2, _permutations, _selection_check('perm'),
    arity_message="perm requires two arguments: n and k",
    summary="Permutations of k items out of n",
), 'npr')
_register(FunctionSpec(
    'comb', 2, 2, _combinations, _selection_check('comb'),
    arity_message="comb requires two arguments: n and k",
    summary="Combinations (n choose k)",
), 'ncr')

# Statistical
_register(FunctionSpec(
    'mean', 1, None, _mean,
    arity_message="mean requires at least one argument",
    summary="Arithmetic mean",
))
_register(FunctionSpec(
    'median', 1, None, _median,
    arity_message="median requires at least one argument",
    summary="Median",
))
_register(FunctionSpec(
    'stdev', 2, None, _sample_stdev,
    arity_message="stdev requires at least two arguments",
    summary="Sample standard deviation",
), 'stddev')

FUNCTIONS: Mapping[str, FunctionSpec] = MappingProxyType(_FUNCTIONS)

# Names for help and completion
FUNCTION_NAMES: List[str] = sorted(FUNCTIONS)


def call_function(name: str, args: Sequence[float]) -> float:
    """Apply the builtin ``name`` (already lower-cased) to ``args``.

    Raises:
        UnknownFunction: no builtin has this name.
        WrongArity: the argument count does not fit the function.
        DomainError: an argument lies outside the function's domain.
    """
    spec = FUNCTIONS.get(name)
    if spec is None:
        raise UnknownFunction(name)
    if not spec.accepts(len(args)):
        raise WrongArity(spec.name, spec.arity_message)
    if spec.check is not None:
        spec.check(*args)
    return float(spec.compute(*args))
