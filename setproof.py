#!/usr/bin/env python3
"""Non-interactive proofs that a Paillier ciphertext encrypts a known value

A prover encrypts a plaintext `m` and shows that `m` is one of the public
candidates `values`, without revealing which one. This is the disjunctive
(one-of-many) Schnorr proof of Cramer, Damgård and Schoenmakers, made
non-interactive with the Fiat-Shamir heuristic.

For each candidate `m_k`, let `u_k = c × g^(-m_k) mod n²`. If `c` encrypts
`m_k` with randomization `r`, then `u_k = r^n`, and the prover knows an n-th
root of `u_k`. The proof is a triplet of lists `(a, e, z)`, aligned with
`values`, such that:
    * `H(a) = Σ e_k mod 2^256`
    * `z_k^n = a_k × u_k^(e_k) mod n²` for every `k`

All the branches but the real one are simulated (`e_k` and `z_k` chosen
first, `a_k` solved from the equation); the challenge of the real branch is
then forced by the hash of the commitments. The simulated responses are
uniform in Z_n*, like the real one `ω × r^e mod n`; responses of a fixed
size or parity would point the verifier to the real branch.

The main entry points of this module are `encrypt_among()` and
`verify_among()`.
"""
import random

import util
import coprime
import paillier

DEFAULT_SECURITY_BITS = 512

# the challenges are combined modulo the range of the hash function
CHALLENGE_MODULUS = 2**256


class InvalidProof(Exception):
    """Raised when the verification of a cryptographic proof fails"""


class PlaintextNotInSet(ValueError):
    """Raised when trying to prove membership of a value outside of the set"""


def _unit_ciphertext(pk, raw_ciphertext, value):
    """Computes `u = c × g^(-value) mod n²`

    When `c` encrypts `value` with randomization `r`, this is `r^n mod n²`.
    """
    g_inverse, _ = pk.raw_multiply(pk.g, -value, randomization=1)
    return raw_ciphertext * g_inverse % pk.nsquare


def encrypt_among(pk, plaintext, values, randomization, security_bits=DEFAULT_SECURITY_BITS, rng=None):
    """Encrypt a plaintext and prove it belongs to a set of values

    Arguments:
        pk (paillier.PaillierPublicKey): the key used to encrypt
        plaintext (int): the value to encrypt, must be one of `values`
        values (list): the public candidates (int); their order matters, the
            proof is aligned with it
        randomization (int): the randomization factor `r` of the encryption,
            chosen by the caller
        security_bits (int, optional): size in bits of the simulated
            challenges and of the commitment factor `ω` of the real branch
        rng (random.Random, optional): source of randomness for the blinding
            factors and simulated challenges; defaults to
            `random.SystemRandom()`

    Returns:
        tuple: pair `(ciphertext, proof)` where `ciphertext` is a
        `paillier.PaillierCiphertext` of `plaintext` under `randomization`
        and `proof` is a triplet `(a, e, z)` of lists (int) aligned with
        `values`

    Raises:
        PlaintextNotInSet: if `plaintext` is not one of `values`
        ValueError: if `values` is empty or contains duplicates; also when
            `security_bits` is below 2 or `randomization` is not invertible
            modulo `n`
    """
    values = list(values)
    if not values:
        raise ValueError('the set of values is empty')
    if len(set(values)) != len(values):
        raise ValueError('the set of values contains duplicates')
    if plaintext not in values:
        raise PlaintextNotInSet('{} is not one of {}'.format(plaintext, values))
    if security_bits < 2:
        raise ValueError('security_bits must be at least 2')
    if randomization <= 0 or util.gcd(randomization, pk.n) != 1:
        raise ValueError('the randomization must be an element of Z_n*')
    if rng is None:
        rng = random.SystemRandom()

    n, n2 = pk.n, pk.nsquare
    ciphertext = pk.encrypt(plaintext, randomization)
    raw_ciphertext = ciphertext.raw_value
    real_index = values.index(plaintext)

    # real branch: commit to a random n-th power
    omega = coprime.sample_coprime(n, security_bits, rng)
    a = [None] * len(values)
    e = [None] * len(values)
    z = [None] * len(values)
    a[real_index] = util.powmod(omega, n, n2)

    # simulated branches: a_k = z_k^n × u_k^(-e_k)
    for k, value in enumerate(values):
        if k == real_index:
            continue
        z[k] = coprime.sample_unit(n, rng)
        e[k] = rng.randrange(2, 2**security_bits - 1)
        u = _unit_ciphertext(pk, raw_ciphertext, value)
        a[k] = util.powmod(z[k], n, n2) * util.powmod(u, -e[k], n2) % n2

    # the hash fixes the sum of the challenges, hence the real one
    simulated_sum = sum(e_k for k, e_k in enumerate(e) if k != real_index)
    e[real_index] = (util.H(a) - simulated_sum) % CHALLENGE_MODULUS
    z[real_index] = omega * util.powmod(randomization, e[real_index], n) % n

    return ciphertext, (a, e, z)


def check_among(pk, ciphertext, proof, values):
    """Check a proof that a ciphertext encrypts one of the given values

    Arguments:
        pk (paillier.PaillierPublicKey): the key the ciphertext is under
        ciphertext (paillier.PaillierCiphertext or int): the ciphertext, or
            its raw value
        proof (tuple): the triplet `(a, e, z)` from `encrypt_among()`
        values (list): the candidates (int), in the order used by the prover

    Raises:
        InvalidProof: if the proof is malformed or does not hold
    """
    n, n2 = pk.n, pk.nsquare
    if isinstance(ciphertext, paillier.PaillierCiphertext):
        ciphertext = ciphertext.raw_value
    if not isinstance(ciphertext, int) or not 0 < ciphertext < n2:
        raise InvalidProof('ciphertext is not an element of Z_n²')

    # shape
    try:
        a, e, z = proof
        a, e, z, values = list(a), list(e), list(z), list(values)
    except (TypeError, ValueError):
        raise InvalidProof('proof is not a triplet of sequences')
    if not values:
        raise InvalidProof('empty set of values')
    if not len(a) == len(e) == len(z) == len(values):
        raise InvalidProof('proof is not aligned with the set of values')

    # ranges
    for a_k, e_k, z_k in zip(a, e, z):
        if not all(isinstance(x, int) for x in (a_k, e_k, z_k)):
            raise InvalidProof('proof contains non-integer elements')
        if not 0 < a_k < n2 or not 0 < z_k < n2 or e_k < 0:
            raise InvalidProof('proof element out of range')

    # binding of the challenges to the commitments
    if util.H(a) != sum(e) % CHALLENGE_MODULUS:
        raise InvalidProof('challenges do not match the commitments')

    # z_k^n = a_k × u_k^(e_k)
    for a_k, e_k, z_k, value in zip(a, e, z, values):
        u = _unit_ciphertext(pk, ciphertext, value)
        if util.powmod(z_k, n, n2) != a_k * util.powmod(u, e_k, n2) % n2:
            raise InvalidProof('verification equation does not hold')


def verify_among(pk, ciphertext, proof, values):
    """Verify a proof that a ciphertext encrypts one of the given values

    Same as `check_among()`, but returns a boolean instead of raising; safe
    to call on untrusted proofs.

    Returns:
        bool: `True` if the proof is valid, `False` otherwise
    """
    try:
        check_among(pk, ciphertext, proof, values)
    except InvalidProof:
        return False
    return True
