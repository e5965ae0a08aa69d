# safechat/crypto/keygen.py
"""
RSA key generation on demonstration-sized primes.

Exports:
 - PUBLIC_EXPONENT_START (65537)
 - generate_primes(lower, upper, rng=None) -> (p, q), distinct primes
 - generate_keys(p, q) -> (PrivateKey, PublicKey)
 - generate_key_pair(bound=None) -> (PublicKey, PrivateKey)
"""
import random
from typing import Optional, Tuple

from safechat.common import config
from safechat.crypto.bigint import BigInt, ONE
from safechat.crypto.numtheory import gcd, modular_inverse, next_prime
from safechat.crypto.rsa import PrivateKey, PublicKey

PUBLIC_EXPONENT_START = 65537
# smallest bound that keeps n above 255
MIN_PRIME_BOUND = 16


def generate_primes(lower: int, upper: int, rng: Optional[random.Random] = None) -> Tuple[BigInt, BigInt]:
    """
    Draw two values from [lower, upper) and advance each to the next prime.
    The primes may land past upper. Equal draws push q to the following prime.
    """
    if lower >= upper:
        raise ValueError("lower bound must be below upper bound")
    rng = rng or random.SystemRandom()
    p = next_prime(BigInt.from_int(rng.randrange(lower, upper)))
    q = next_prime(BigInt.from_int(rng.randrange(lower, upper)))
    if p == q:
        q = next_prime(q)
    return p, q


def generate_keys(p: BigInt, q: BigInt) -> Tuple[PrivateKey, PublicKey]:
    n = p.mul(q)
    p1, q1 = p.decrement(), q.decrement()
    e = BigInt.from_int(PUBLIC_EXPONENT_START)
    while not (gcd(p1, e) == ONE and gcd(q1, e) == ONE):
        e = e.increment().increment()
    d = modular_inverse(e, p1.mul(q1))
    return PrivateKey(n=n, d=d), PublicKey(n=n, e=e)


def generate_key_pair(bound: Optional[int] = None) -> Tuple[PublicKey, PrivateKey]:
    bound = bound or config.KEY_PRIME_BOUND
    if bound < MIN_PRIME_BOUND:
        raise ValueError(f"key prime bound must be at least {MIN_PRIME_BOUND}")
    p, q = generate_primes(bound, bound * 2)
    priv, pub = generate_keys(p, q)
    return pub, priv
