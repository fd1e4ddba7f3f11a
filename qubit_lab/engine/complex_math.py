"""Complex scalar type and complex-vector utilities.

``Complex`` is an immutable value: every operation returns a new instance.
Vector helpers accept any sequence of ``Complex``/``complex`` values (or a
numpy array) and work on ``complex128`` arrays internally.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Union

import numpy as np

from .errors import DimensionMismatch, DivisionByZero, ZeroVector

DEFAULT_EPS = 1e-10
ZERO_THRESHOLD = 1e-15


@dataclass(frozen=True)
class Complex:
    """Complex number re + i*im with value semantics."""
    re: float = 0.0
    im: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, "re", float(self.re))
        object.__setattr__(self, "im", float(self.im))

    # ---- Arithmetic -------------------------------------------------------

    def add(self, other: ComplexLike) -> Complex:
        other = as_complex(other)
        return Complex(self.re + other.re, self.im + other.im)

    def sub(self, other: ComplexLike) -> Complex:
        other = as_complex(other)
        return Complex(self.re - other.re, self.im - other.im)

    def mul(self, other: ComplexLike) -> Complex:
        other = as_complex(other)
        return Complex(self.re * other.re - self.im * other.im,
                       self.re * other.im + self.im * other.re)

    def div(self, other: ComplexLike) -> Complex:
        """Divide by ``other``; raises DivisionByZero when |other|^2 < 1e-15."""
        other = as_complex(other)
        denominator = other.re * other.re + other.im * other.im
        if denominator < ZERO_THRESHOLD:
            raise DivisionByZero(f"Complex division by {other.to_string()}")
        return Complex((self.re * other.re + self.im * other.im) / denominator,
                       (self.im * other.re - self.re * other.im) / denominator)

    def conj(self) -> Complex:
        return Complex(self.re, -self.im)

    def abs(self) -> float:
        return math.hypot(self.re, self.im)

    def abs_squared(self) -> float:
        return self.re * self.re + self.im * self.im

    def arg(self) -> float:
        """Phase in radians, range [-pi, pi]."""
        return math.atan2(self.im, self.re)

    def pow(self, n: float) -> Complex:
        """z^n = |z|^n * exp(i * n * arg(z))."""
        return Complex.from_polar(self.abs() ** n, n * self.arg())

    def scale(self, factor: float) -> Complex:
        return Complex(self.re * factor, self.im * factor)

    # ---- Comparison -------------------------------------------------------

    def equals(self, other: ComplexLike, eps: float = DEFAULT_EPS) -> bool:
        other = as_complex(other)
        return abs(self.re - other.re) < eps and abs(self.im - other.im) < eps

    def is_real(self, eps: float = DEFAULT_EPS) -> bool:
        return abs(self.im) < eps

    def is_imaginary(self, eps: float = DEFAULT_EPS) -> bool:
        return abs(self.re) < eps

    # ---- Constructors -----------------------------------------------------

    @staticmethod
    def exp(angle: float) -> Complex:
        """Unit phasor cos(angle) + i*sin(angle)."""
        return Complex(math.cos(angle), math.sin(angle))

    @staticmethod
    def from_polar(r: float, theta: float) -> Complex:
        return Complex(r * math.cos(theta), r * math.sin(theta))

    @staticmethod
    def real(value: float) -> Complex:
        return Complex(value, 0.0)

    @staticmethod
    def imaginary(value: float) -> Complex:
        return Complex(0.0, value)

    @staticmethod
    def from_complex(value: complex) -> Complex:
        value = complex(value)
        return Complex(value.real, value.imag)

    # ---- Conversion / display ---------------------------------------------

    def to_string(self, precision: int = 3) -> str:
        threshold = 10.0 ** (-precision)
        re = f"{self.re:.{precision}f}"
        im = f"{self.im:.{precision}f}"
        if abs(self.im) < threshold:
            return re
        if abs(self.re) < threshold:
            return f"{im}i"
        return f"{re}+{im}i" if self.im >= 0 else f"{re}{im}i"

    def __complex__(self) -> complex:
        return complex(self.re, self.im)

    def __add__(self, other):
        return self.add(other)

    def __radd__(self, other):
        return as_complex(other).add(self)

    def __sub__(self, other):
        return self.sub(other)

    def __rsub__(self, other):
        return as_complex(other).sub(self)

    def __mul__(self, other):
        return self.mul(other)

    def __rmul__(self, other):
        return as_complex(other).mul(self)

    def __truediv__(self, other):
        return self.div(other)

    def __rtruediv__(self, other):
        return as_complex(other).div(self)

    def __neg__(self) -> Complex:
        return Complex(-self.re, -self.im)

    def __abs__(self) -> float:
        return self.abs()

    def __str__(self) -> str:
        return self.to_string()


ComplexLike = Union[Complex, complex, float, int]

Complex.ZERO = Complex(0.0, 0.0)
Complex.ONE = Complex(1.0, 0.0)
Complex.I = Complex(0.0, 1.0)
Complex.MINUS_I = Complex(0.0, -1.0)


def as_complex(value: ComplexLike) -> Complex:
    """Coerce a Python/numpy number or a Complex into a Complex."""
    if isinstance(value, Complex):
        return value
    return Complex.from_complex(value)


def to_array(vector: Iterable[ComplexLike] | np.ndarray) -> np.ndarray:
    """Convert a complex vector into a fresh 1-D complex128 array."""
    if isinstance(vector, np.ndarray):
        return vector.astype(np.complex128).reshape(-1)
    return np.array([complex(v) for v in vector], dtype=np.complex128)


# =========================================================================
# Vector utilities
# =========================================================================

def norm_squared(vector) -> float:
    arr = to_array(vector)
    return float(np.sum(np.abs(arr) ** 2))


def is_normalized(vector, eps: float = DEFAULT_EPS) -> bool:
    """True when sum |c_i|^2 is within eps of 1."""
    return abs(norm_squared(vector) - 1.0) < eps


def normalize(vector) -> np.ndarray:
    """Return the vector scaled to unit norm.

    Raises ZeroVector when the norm is below 1e-15.
    """
    arr = to_array(vector)
    norm = math.sqrt(float(np.sum(np.abs(arr) ** 2)))
    if norm < ZERO_THRESHOLD:
        raise ZeroVector("Cannot normalize a zero vector")
    return arr / norm


def inner_product(a, b) -> Complex:
    """<a|b> = sum conj(a_i) * b_i."""
    arr_a, arr_b = to_array(a), to_array(b)
    if arr_a.shape != arr_b.shape:
        raise DimensionMismatch(
            f"Vectors must have the same length, got {arr_a.size} and {arr_b.size}")
    return Complex.from_complex(np.vdot(arr_a, arr_b))


def tensor_product(a, b) -> np.ndarray:
    """|a> (x) |b>, row-major in the index of ``a``."""
    return np.kron(to_array(a), to_array(b))
