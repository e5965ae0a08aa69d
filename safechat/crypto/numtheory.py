# safechat/crypto/numtheory.py
"""
Number theory on BigInt values.

Exports:
 - mod_pow(x, y, m) -> x^y mod m (recursive halving of y)
 - euler_totient(n) -> phi(n) by trial division
 - modular_inverse(a, m) -> a^(phi(m)-1) mod m, valid when gcd(a, m) == 1
 - is_prime(x), next_prime(x), gcd(a, b)
"""
from safechat.crypto.bigint import BigInt, ONE, TWO, ZERO

THREE = BigInt.from_int(3)


def mod_pow(x: BigInt, y: BigInt, m: BigInt) -> BigInt:
    """Compute x^y mod m. y == 0 yields 1 whatever m is."""
    if y.is_zero():
        return ONE
    p = mod_pow(x, y.half(), m)
    p = p.mul(p).divmod(m)[1]
    if y.is_even():
        return p
    return p.mul(x).divmod(m)[1]


def euler_totient(n: BigInt) -> BigInt:
    """
    phi(n) via trial division of a working copy of n. Only fast for the
    small moduli produced by keygen.
    """
    result = n
    work = n
    i = TWO
    while i.mul(i).compare(work) <= 0:
        q, r = work.divmod(i)
        if r.is_zero():
            while r.is_zero():
                work = q
                q, r = work.divmod(i)
            result = result.sub(result.divmod(i)[0])
        i = i.increment()
    if work.compare(ONE) > 0:
        result = result.sub(result.divmod(work)[0])
    return result


def modular_inverse(a: BigInt, m: BigInt) -> BigInt:
    """Inverse of a modulo m by Euler's theorem. Callers ensure gcd(a, m) == 1."""
    if m.is_zero():
        raise ZeroDivisionError("modulus must be non-zero")
    return mod_pow(a, euler_totient(m).decrement(), m)


def is_prime(x: BigInt) -> bool:
    if x.compare(TWO) < 0:
        return False
    if x == TWO:
        return True
    if x.is_even():
        return False
    i = THREE
    while i.mul(i).compare(x) <= 0:
        if x.divmod(i)[1].is_zero():
            return False
        i = i.increment().increment()
    return True


def next_prime(x: BigInt) -> BigInt:
    """Smallest prime strictly greater than x."""
    while True:
        x = x.increment()
        if is_prime(x):
            return x


def gcd(a: BigInt, b: BigInt) -> BigInt:
    if b == ZERO:
        return a
    return gcd(b, a.divmod(b)[1])
