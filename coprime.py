#!/usr/bin/env python3
"""Sampling of random integers coprime to a Paillier modulus

The set membership proofs need blinding factors from Z_n* (the simulated
responses and the commitment of the real branch). This module draws them.

The main entry point of this module is `sample_coprime()`.
"""
import random

import util

# above this bound, a random odd integer is coprime to an RSA modulus with
# overwhelming probability, and the gcd is skipped; this is a probabilistic
# relaxation, set to None (or pass `threshold=None`) to always check
COPRIME_CHECK_THRESHOLD = 2**1024


def sample_coprime(target, bit_length, rng=None, threshold=COPRIME_CHECK_THRESHOLD):
    """Draw a random integer coprime to `target`

    The size of the drawn integer is `b = min(floor(log2(target)),
    bit_length)` bits: its top bit and its least significant bit are forced
    to 1, so the result is an odd integer from `[2^(b-1) + 1, 2^b)`, which is
    in particular lower than `target`.

    Arguments:
        target (int): the integer the result should be coprime to (usually
            the parameter `n` of a Paillier public key)
        bit_length (int): upper bound on the size of the result, in bits
        rng (random.Random, optional): source of randomness; defaults to
            `random.SystemRandom()`; a seeded `random.Random` makes the
            result reproducible (tests only)
        threshold (int, optional): draws larger than this value are returned
            without checking their coprimality; `None` disables the shortcut

    Returns:
        int: `x` such that `gcd(x, target) = 1` (with overwhelming
        probability only when `x > threshold`)

    Raises:
        ValueError: if `target` or `bit_length` is too small to leave room
            for a non-trivial odd value
    """
    bits = min(target.bit_length() - 1, bit_length)
    if bits < 2:
        raise ValueError('cannot sample a coprime of {} bits below {}'.format(bit_length, target))
    if rng is None:
        rng = random.SystemRandom()

    top_bit = 1 << (bits - 1)
    while True:
        candidate = rng.getrandbits(bits) | top_bit | 1
        if threshold is not None and candidate > threshold:
            return candidate
        if util.gcd(candidate, target) == 1:
            return candidate


def sample_unit(target, rng=None):
    """Draw a uniformly random element of Z_target*

    Unlike `sample_coprime()`, the result is spread over the whole of
    `[1, target)`, with no forced bits.

    Arguments:
        target (int): the modulus (usually the parameter `n` of a Paillier
            public key)
        rng (random.Random, optional): source of randomness; defaults to
            `random.SystemRandom()`

    Returns:
        int: `x` from `[1, target)` such that `gcd(x, target) = 1`

    Raises:
        ValueError: if `target` is lower than 2
    """
    if target < 2:
        raise ValueError('Z_{}* is empty'.format(target))
    if rng is None:
        rng = random.SystemRandom()

    while True:
        candidate = rng.randrange(1, target)
        if util.gcd(candidate, target) == 1:
            return candidate
