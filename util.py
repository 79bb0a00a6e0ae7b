#!/usr/bin/env python3
"""Some utilities (mostly arithmetic, and the Fiat-Shamir hash)"""
import random
import struct
import hashlib

import gmpy2


def powmod(x, y, m):
    """Computes `x^y mod m`

    The method `powmod()` from `gmpy2` is faster than Python's builtin
    `powmod()`. However, it does add some overhead which should be skipped for
    `x = 1`.

    Arguments:
        x (int): base of the exponentiation
        y (int): exponent
        m (int): modulus

    Returns:
        int: the result of `x^y mod m`
    """
    if x == 1:
        return 1
    elif y < 0:
        return invert(powmod(x, -y, m), m)
    else:
        return int(gmpy2.powmod(x, y, m))


def invert(x, m):
    """Computes the invert of `x` modulo `m`

    This is a wrapper for `invert() from `gmpy2`.

    Arguments:
        x (int): element to be inverted
        m (int): modulus

    Returns:
        int: y such that `x × y = 1 mod m`
    """
    return int(gmpy2.invert(x, m))


def gcd(x, y):
    """Greatest common divisor of `x` and `y` (wraps `gcd()` from `gmpy2`)"""
    return int(gmpy2.gcd(x, y))


def is_prime(x):
    """Tests whether `x` is probably prime

    This is a wrapper for `is_prime() from `gmpy2`.

    Arguments:
        x (int): the candidate prime

    Returns:
        bool: `True` if `x` is probably prime else `False`
    """
    return bool(gmpy2.is_prime(x))


def genprime(n_bits, safe_prime=False):
    """Generate a probable prime number of n_bits

    This method is based on `next_prime()` from `gmpy2` and adds the safe prime
    feature.

    Arguments:
        n_bits (int): the size of the prime to be generated, in bits
        safe_prime (bool): whether the returned value should be a safe prime a
            just a common prime

    Returns:
        int: a probable prime `x` from `[2^(n_bits-1), 2^n_bits]`

        Is `safe_prime` is `True`, then `x` is also a probable safe prime
    """
    if safe_prime:
        # q of the form 2*p + 1 such that p is prime as well
        while True:
            p = genprime(n_bits - 1)
            q = 2*p + 1
            if is_prime(q):
                return q
    # just a random prime
    n = random.SystemRandom().randrange(2**(n_bits-1), 2**n_bits) | 1
    return int(gmpy2.next_prime(n))


def crt(residues, moduli):
    """Applies the Chinese Remainder Theorem on given residues

    Arguments:
        residues (list): the residues (int)
        moduli (list): the corresponding modulis (int) in the same order

    Returns:
        int: `x` such that `x < ∏ moduli` and `x % modulus = residue` for
        residue, modulus in `zip(moduli, residues)`
    """
    product = prod(moduli)
    r = 0
    for residue, modulus in zip(residues, moduli):
        NX = product // modulus
        r += residue * NX * invert(NX, modulus)
        r %= product
    return r


def prod(elements):
    """Product of the given integers (used by `crt()`)"""
    product = 1
    for element in elements:
        product *= element
    return product


def H(values):
    """Hash a sequence of integers into a 256 bit integer

    This is the Fiat-Shamir transcript of the set membership proofs. Each
    value is written in decimal and prefixed by the length of that
    representation (8 bytes, big-endian), so that two different sequences
    cannot produce the same input to SHA-256.

    Arguments:
        values (iterable): the integers to be hashed, in order

    Returns:
        int: the SHA-256 digest, read as a big-endian integer from
        `[0, 2^256)`
    """
    h = hashlib.sha256()
    for value in values:
        encoded = str(value).encode()
        h.update(struct.pack('>Q', len(encoded)))
        h.update(encoded)
    return int.from_bytes(h.digest(), 'big')
