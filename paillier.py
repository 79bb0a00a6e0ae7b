#!/usr/bin/env python3
"""Implementation of the Paillier cryptosystem

The Paillier cryptosystem is a public key encryption system with the property
of being partially homomorphic for addition. Only the parts needed by the set
membership proofs are provided here: key generation, encryption with a chosen
randomization, and decryption.

The main entry point of this module is `generate_paillier_keypair()`.
"""
import random

import util


def generate_paillier_keypair(n_bits=2048, safe_primes=True):
    """Generate a pair of keys for the Paillier cryptosystem

    Arguments:
        n_bits (int, optional): the number of bits for the parameter n; they
            security corresponds to the difficulty of factoring `n` (as in
            RSA); as of 2018, NIST and ANSSI recommend at least 2048 bits and
            NSA 3072 bits
        safe_primes (bool, optional): generating safe primes takes much more
            time (generating a 2048 bit keypair takes one minute with safe
            primes, but a fraction of a second without); disabling the use of
            safe primes can be useful when security is not important (e.g.
            benchmarking)
            DO NOT SET TO FALSE IN PRODUCTION

    Returns:
        tuple: pair of two elements, usually named respectively `pk`
            (`PaillierPublicKey`), and `sk` (`PaillierSecretKey`)

        The public key (`pk`) allows to encrypt messages (relative integers);
        the secret key (`sk`) allows to decrypt ciphertexts generated using
        that public key (but not using another).
    """
    p = util.genprime(n_bits // 2, safe_primes)
    q = util.genprime(n_bits - n_bits // 2, safe_primes)
    while q == p:
        q = util.genprime(n_bits - n_bits // 2, safe_primes)
    g = 1 + p*q
    sk = PaillierSecretKey(p, q, g)
    return sk.public_key, sk


class PaillierPublicKey:
    """Public key for the Paillier cryptosystem

    Attributes:
        n (int): parameter `n` from the Paillier cryptosystem, should be the
            product of large safe primes (as large as possible, so ideally two
            primes of the same size)
        g (int): parameter `g` from the Paillier cryptsystem, should an
            invertible element of Z_n² whose order is a positive multiple of
            λ(n) where λ is the Carmichael function; in
            `generate_paillier_keypair()`, `g` is set to `1 + n`
        nsquare (int): cached value of `n × n`, used in operations on the
            ciphertext
    """

    def __init__(self, n, g):
        """Constructor

        Arguments:
            n (int): parameter from the Paillier cryptosystem
            g (int): parameter from the Paillier cryptosystem
        """
        self.n = n
        self.nsquare = n * n
        self.g = g

    def encrypt(self, m, randomization=None):
        """Encrypt a message m into a ciphertext

        Arguments:
            m (int): the message to be encrypted; note that values will be
                reduced modulo `n`
            randomization (int, optional): the randomization factor `r`; the
                encryption is deterministic when it is provided

        Returns:
            PaillierCiphertext: a ciphertext for the given integer `m` it can
                be decrypted using the secret key corresponding to this public
                key
        """
        raw_value, _ = self.raw_multiply(self.g, m, randomization)
        return PaillierCiphertext(self, raw_value)

    def raw_multiply(self, a, b, randomization=None):
        """Multiply a raw ciphertext with a plaintext

        Arguments:
            a (int): a ciphertext for this Paillier public key
            b (int): a plaintext
            randomization (int, optional): the randomization factor; if not
                provided, a secure-random value is chosen

        Returns:
            tuple: a pair of integers, corresponding to the raw ciphertext
            encrypting the product of the value encrypted by `a` and the value
            `b`, and the randomization used
        """
        n2 = self.nsquare

        # explicitely reduces to avoid large exponents
        b %= self.n
        if b > self.n // 2:
            b -= self.n

        # if a is of the form (1+n)^q, then we can avoid the exponentiation
        q, r = divmod(a-1, self.n)
        if r == 0:
            raw_value = (1 + self.n * q * b) % n2
        else:
            raw_value = util.powmod(a, b, n2)

        # apply randomization
        if randomization is None:
            randomization = random.SystemRandom().randrange(1, self.n)
        raw_value = raw_value * util.powmod(randomization, self.n, n2) % n2

        return raw_value, randomization

    @staticmethod
    def L(u, n):
        """As defined in the Paillier cryptosystem

        Used for decryption operations.

        Arguments:
            u (int): ciphertext (or g) to a secret exponent
            n (int): modulus currently in use
        """
        return (u - 1) // n


class PaillierSecretKey:
    """Secret key for the Paillier cryptsystem

    Attributes:
        p (int): first prime in the factorization of `n`
        q (int): second prime in the factorization of `n`
        public_key (PaillierPublicKey): the corresponding public key
        hp (int): cached value used during decryption
        hq (int): cached value used during decryption
    """
    def __init__(self, p, q, g):
        """Constructor

        Arguments:
            p (int): parameter from the Paillier cryptosystem
            q (int): parameter from the Paillier cryptosystem
            g (int): parameter from the Paillier cryptosystem
        """

        self.p = p
        self.q = q
        self.public_key = pk = PaillierPublicKey(p*q, g)

        # pre-computations
        self.hp = util.invert(pk.L(util.powmod(pk.g, p-1, p*p), p), p)
        self.hq = util.invert(pk.L(util.powmod(pk.g, q-1, q*q), q), q)

    def decrypt(self, ciphertext, relative=True):
        """Decrypt a ciphertext

        Arguments:
            ciphertext (PaillierCiphertext or int): the ciphertext to be
                decrypted, or its raw value
            relative (bool): whether the result should be interpreted as a
                relative integer (i.e. in [-n/2, n/2] rather than in [0, n])

        Returns:
            int: the message represented in the ciphertext

            If relative is set to `True`, then the returned value is a relative
            integer between `-n/2` and `n/2`. Otherwise, it is a non-negative
            integer lower than `n`.
        """
        pk = self.public_key
        p, q = self.p, self.q
        if isinstance(ciphertext, PaillierCiphertext):
            ciphertext = ciphertext.raw_value
        m_mod_p = pk.L(util.powmod(ciphertext, p-1, p*p), p) * self.hp % p
        m_mod_q = pk.L(util.powmod(ciphertext, q-1, q*q), q) * self.hq % q
        plaintext = util.crt([m_mod_p, m_mod_q], [p, q])
        if relative and plaintext >= pk.n//2:
            plaintext -= pk.n
        return plaintext


class PaillierCiphertext:
    """Ciphertext from the Paillier cryptosystem

    Attributes:
        public_key (PaillierPublicKey): the Paillier public key used to
            generate this ciphertext
        raw_value (int): an element of Z_n², that should equals to `g^m r^n`
            where `n` and `g` are the attributes of the public key, `m` is the
            message which was encrypted and `r` is a random element of Z_n
    """
    def __init__(self, public_key, raw_value):
        """Constructor

        Arguments:
            public_key (PaillierPublicKey): the Paillier public key
            raw_value (int): the actual ciphertext as an element of Z_n²
        """
        self.public_key = public_key
        self.raw_value = raw_value

    def __eq__(self, other):
        if not isinstance(other, PaillierCiphertext):
            return NotImplemented
        return self.raw_value == other.raw_value

    def __hash__(self):
        return hash(self.raw_value)

    def __repr__(self):
        return 'PaillierCiphertext({})'.format(self.raw_value)
