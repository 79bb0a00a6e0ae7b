#!/usr/bin/env python3
import random
import unittest

import phe

import util
import coprime
import paillier
import setproof

_N_BITS = 128
_R = 2**61 - 1  # prime, hence invertible modulo any test modulus
_VALUES = [41, 48468, 15, 454, 184]


class SequenceRandom:
    """Mock random source returning predetermined values"""
    def __init__(self, values):
        self.values = list(values)

    def getrandbits(self, k):
        return self.values.pop(0)


class TestUtil(unittest.TestCase):
    def test_powmod(self):
        self.assertEqual(util.powmod(3, 4, 7), 81 % 7)
        self.assertEqual(util.powmod(1, 12345, 7), 1)
        self.assertEqual(util.powmod(3, -1, 7) * 3 % 7, 1)

    def test_gcd(self):
        self.assertEqual(util.gcd(12, 18), 6)
        self.assertEqual(util.gcd(35, 12), 1)

    def test_hash(self):
        h = util.H([1, 2, 3])
        self.assertEqual(h, util.H([1, 2, 3]))
        self.assertGreaterEqual(h, 0)
        self.assertLess(h, 2**256)
        self.assertNotEqual(h, util.H([3, 2, 1]))

        # the decimal representations are not simply concatenated
        self.assertNotEqual(util.H([1, 23]), util.H([12, 3]))
        self.assertNotEqual(util.H([123]), util.H([12, 3]))

    def test_hash_known_answer(self):
        # SHA-256 of 00000000 00000001 "1" 00000000 00000002 "23"
        digest = 0xae097d5e2f0d50d0fe8ea6e7d3a946b95bd31a9ac8111fe5d86cd7047b38ea15
        self.assertEqual(util.H([1, 23]), digest)


class TestCoprime(unittest.TestCase):
    def test_interval(self):
        target = 3 * 5 * 7 * 11 * 13 * 2**70 + 1
        for _ in range(100):
            x = coprime.sample_coprime(target, 40)
            self.assertGreaterEqual(x, 2**39 + 1)
            self.assertLess(x, 2**40)
            self.assertEqual(x % 2, 1)
            self.assertEqual(util.gcd(x, target), 1)

    def test_capped_by_target(self):
        pk, sk = paillier.generate_paillier_keypair(_N_BITS)
        bits = pk.n.bit_length() - 1
        for _ in range(100):
            x = coprime.sample_coprime(pk.n, 4096)
            self.assertEqual(x.bit_length(), bits)
            self.assertLess(x, pk.n)
            self.assertEqual(util.gcd(x, pk.n), 1)

    def test_rejects_non_coprime(self):
        target = 3 * 2**70
        # 2^39 + 1 is a multiple of 3, 2^39 + 3 is not
        rng = SequenceRandom([2**39 + 1, 2**39 + 3])
        self.assertEqual(coprime.sample_coprime(target, 40, rng), 2**39 + 3)

    def test_threshold(self):
        target = 3 * 2**1101
        multiple_of_3 = 3 * (2**1098 + 1)
        coprime_to_3 = 2**1099 + 3

        # large draws are not checked
        rng = SequenceRandom([multiple_of_3, coprime_to_3])
        self.assertEqual(coprime.sample_coprime(target, 1100, rng), multiple_of_3)

        # unless the shortcut is disabled
        rng = SequenceRandom([multiple_of_3, coprime_to_3])
        x = coprime.sample_coprime(target, 1100, rng, threshold=None)
        self.assertEqual(x, coprime_to_3)

    def test_deterministic(self):
        a = coprime.sample_coprime(2**127 - 1, 100, random.Random(42))
        b = coprime.sample_coprime(2**127 - 1, 100, random.Random(42))
        self.assertEqual(a, b)

    def test_too_small(self):
        self.assertRaises(ValueError, coprime.sample_coprime, 3, 10)
        self.assertRaises(ValueError, coprime.sample_coprime, 2**64 + 1, 1)

    def test_sample_unit(self):
        pk, sk = paillier.generate_paillier_keypair(_N_BITS)
        units = [coprime.sample_unit(pk.n) for _ in range(100)]
        for x in units:
            self.assertGreaterEqual(x, 1)
            self.assertLess(x, pk.n)
            self.assertEqual(util.gcd(x, pk.n), 1)

        # no forced bits
        self.assertTrue(any(x % 2 == 0 for x in units))
        self.assertTrue(any(x.bit_length() < pk.n.bit_length() - 1 for x in units))

        a = coprime.sample_unit(pk.n, random.Random(42))
        b = coprime.sample_unit(pk.n, random.Random(42))
        self.assertEqual(a, b)

        self.assertRaises(ValueError, coprime.sample_unit, 1)


class TestPaillier(unittest.TestCase):
    def test_keygen(self):
        pk, sk = paillier.generate_paillier_keypair(_N_BITS)

        # check p and q are actually safe primes
        self.assertTrue(util.is_prime(sk.p))
        self.assertTrue(util.is_prime(sk.q))
        self.assertTrue(util.is_prime((sk.p-1) // 2))
        self.assertTrue(util.is_prime((sk.q-1) // 2))
        self.assertNotEqual(sk.p, sk.q)

        # check consistency of n, nsquare and g
        self.assertEqual(pk.n, sk.p * sk.q)
        self.assertEqual(pk.nsquare, pk.n**2)
        self.assertEqual(pk.g, pk.n + 1)

    def test_decrypt(self):
        pk, sk = paillier.generate_paillier_keypair(_N_BITS)
        self.assertEqual(sk.decrypt(pk.encrypt(-1)), -1)
        self.assertEqual(sk.decrypt(pk.encrypt(0)), 0)
        self.assertEqual(sk.decrypt(pk.encrypt(12)), 12)
        self.assertEqual(sk.decrypt(pk.encrypt(12).raw_value), 12)
        self.assertEqual(sk.decrypt(pk.encrypt(-1), relative=False), pk.n - 1)

    def test_randomization(self):
        pk, sk = paillier.generate_paillier_keypair(_N_BITS)

        # the ciphertexts are randomized
        self.assertNotEqual(pk.encrypt(12), pk.encrypt(12))

        # unless the randomization is given
        c = pk.encrypt(12, _R)
        self.assertEqual(c, pk.encrypt(12, _R))
        self.assertGreater(c.raw_value, 0)
        self.assertLess(c.raw_value, pk.nsquare)
        self.assertEqual(sk.decrypt(c), 12)

    def test_phe_interoperability(self):
        phe_pk, phe_sk = phe.paillier.generate_paillier_keypair(n_length=256)
        pk = paillier.PaillierPublicKey(phe_pk.n, phe_pk.g)
        for m in [0, 15, 48468]:
            c = pk.encrypt(m, _R)
            self.assertEqual(c.raw_value, phe_pk.raw_encrypt(m, r_value=_R))
            self.assertEqual(phe_sk.raw_decrypt(c.raw_value), m)


class TestSetProof(unittest.TestCase):
    @classmethod
    def setUpClass(cls):
        cls.pk, cls.sk = paillier.generate_paillier_keypair(_N_BITS)

    def prove(self, plaintext=15, values=_VALUES, **kwargs):
        return setproof.encrypt_among(self.pk, plaintext, values, _R, **kwargs)

    def test_completeness(self):
        for plaintext in _VALUES:
            ciphertext, proof = self.prove(plaintext)
            self.assertTrue(setproof.verify_among(self.pk, ciphertext, proof, _VALUES))
            self.assertEqual(self.sk.decrypt(ciphertext), plaintext)

    def test_shape(self):
        ciphertext, (a, e, z) = self.prove()
        self.assertEqual(len(a), len(_VALUES))
        self.assertEqual(len(e), len(_VALUES))
        self.assertEqual(len(z), len(_VALUES))
        self.assertEqual(util.H(a), sum(e) % setproof.CHALLENGE_MODULUS)

    def test_scenario_valid(self):
        ciphertext, proof = self.prove(15)
        self.assertTrue(setproof.verify_among(self.pk, ciphertext, proof, _VALUES))
        self.assertEqual(self.sk.decrypt(ciphertext), 15)

        # raw ciphertexts are accepted as well
        self.assertTrue(setproof.verify_among(self.pk, ciphertext.raw_value, proof, _VALUES))

    def test_scenario_value_removed(self):
        ciphertext, proof = self.prove(15)
        values = [41, 48468, 454, 184]
        self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, values))

    def test_scenario_bit_flip(self):
        ciphertext, (a, e, z) = self.prove(15)
        for k in range(len(z)):
            tampered = list(z)
            tampered[k] ^= 1 << 3
            proof = (a, e, tampered)
            self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, _VALUES))

    def test_soundness(self):
        ciphertext, proof = self.prove(15)

        # same size, but 15 replaced
        values = [41, 48468, 16, 454, 184]
        self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, values))

        # proof for another ciphertext
        other = self.pk.encrypt(15)
        self.assertFalse(setproof.verify_among(self.pk, other, proof, _VALUES))

        # other key
        pk, sk = paillier.generate_paillier_keypair(_N_BITS)
        self.assertFalse(setproof.verify_among(pk, ciphertext, proof, _VALUES))

    def test_tampering(self):
        ciphertext, proof = self.prove(15)
        for i in range(3):
            for k in range(len(_VALUES)):
                tampered = [list(sequence) for sequence in proof]
                tampered[i][k] += 1
                self.assertFalse(setproof.verify_among(self.pk, ciphertext, tampered, _VALUES))

    def test_order(self):
        ciphertext, proof = self.prove(15)
        values = list(reversed(_VALUES))
        self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, values))
        values = [48468, 41, 15, 454, 184]
        self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, values))

    def test_deterministic(self):
        c1, proof1 = self.prove(15, rng=random.Random(42))
        c2, proof2 = self.prove(15, rng=random.Random(42))
        self.assertEqual(c1, c2)
        self.assertEqual(proof1, proof2)

        c3, proof3 = self.prove(15, rng=random.Random(43))
        self.assertEqual(c1, c3)
        self.assertNotEqual(proof1, proof3)

    def test_security_bits(self):
        for security_bits in [2, 16, 80, 300]:
            ciphertext, proof = self.prove(15, security_bits=security_bits)
            self.assertTrue(setproof.verify_among(self.pk, ciphertext, proof, _VALUES))

    def test_edge_values(self):
        # single candidate
        ciphertext, proof = self.prove(7, [7])
        self.assertTrue(setproof.verify_among(self.pk, ciphertext, proof, [7]))
        self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, [8]))

        # relative integers
        values = [-1, 0, 1]
        for plaintext in values:
            ciphertext, proof = self.prove(plaintext, values)
            self.assertTrue(setproof.verify_among(self.pk, ciphertext, proof, values))
            self.assertEqual(self.sk.decrypt(ciphertext), plaintext)

    def test_malformed(self):
        ciphertext, (a, e, z) = self.prove(15)
        malformed = [
            None,
            (a, e),
            (a, e, z, z),
            (a[:-1], e, z),
            (a, e[:-1], z),
            (a, e, z[:-1]),
            (a[:-1], e[:-1], z[:-1]),
            (a, e, [str(z_k) for z_k in z]),
            (a, [-e_k for e_k in e], z),
            ([0] * len(a), e, z),
            (a, e, [self.pk.nsquare] * len(z)),
        ]
        for proof in malformed:
            self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, _VALUES))
        self.assertFalse(setproof.verify_among(self.pk, ciphertext, ([], [], []), []))
        self.assertFalse(setproof.verify_among(self.pk, 0, (a, e, z), _VALUES))
        self.assertFalse(setproof.verify_among(self.pk, self.pk.nsquare, (a, e, z), _VALUES))

        # the checking variant raises
        self.assertRaises(setproof.InvalidProof, setproof.check_among,
                          self.pk, ciphertext, (a, e, z[:-1]), _VALUES)

    def test_preconditions(self):
        self.assertRaises(setproof.PlaintextNotInSet, self.prove, 16)
        self.assertRaises(ValueError, self.prove, 16)
        self.assertRaises(ValueError, self.prove, 15, [])
        self.assertRaises(ValueError, self.prove, 15, [15, 41, 15])
        self.assertRaises(ValueError, self.prove, 15, security_bits=1)
        self.assertRaises(ValueError, setproof.encrypt_among, self.pk, 15, _VALUES, 0)
        self.assertRaises(ValueError, setproof.encrypt_among, self.pk, 15, _VALUES, self.sk.p)

    def test_real_branch_hidden(self):
        real_index = _VALUES.index(15)
        guessed = 0
        simulated = []
        for _ in range(20):
            ciphertext, (a, e, z) = self.prove(15, security_bits=64)
            self.assertTrue(setproof.verify_among(self.pk, ciphertext, (a, e, z), _VALUES))
            # the longest response is not necessarily the real one
            if max(range(len(z)), key=lambda k: z[k].bit_length()) == real_index:
                guessed += 1
            simulated.extend(z_k for k, z_k in enumerate(z) if k != real_index)
        self.assertLess(guessed, 20)

        # the simulated responses range over Z_n, with both parities
        for z_k in simulated:
            self.assertLess(z_k, self.pk.n)
        self.assertTrue(any(z_k % 2 == 0 for z_k in simulated))
        self.assertTrue(any(z_k.bit_length() > 64 for z_k in simulated))

    def test_general_generator(self):
        # g = (1+n)^3 × 5^n is a valid generator not of the form 1 + kn
        n, n2 = self.pk.n, self.pk.nsquare
        g = (1 + 3*n) * util.powmod(5, n, n2) % n2
        sk = paillier.PaillierSecretKey(self.sk.p, self.sk.q, g)
        pk = sk.public_key
        self.assertNotEqual((pk.g - 1) % pk.n, 0)

        for plaintext in _VALUES:
            ciphertext, proof = setproof.encrypt_among(pk, plaintext, _VALUES, _R)
            self.assertTrue(setproof.verify_among(pk, ciphertext, proof, _VALUES))
            self.assertEqual(sk.decrypt(ciphertext), plaintext)

        # the generator is part of the statement
        self.assertFalse(setproof.verify_among(self.pk, ciphertext, proof, _VALUES))
        values = [41, 48468, 16, 454, 184]
        ciphertext, proof = setproof.encrypt_among(pk, 15, _VALUES, _R)
        self.assertFalse(setproof.verify_among(pk, ciphertext, proof, values))

    def test_phe_key(self):
        phe_pk, phe_sk = phe.paillier.generate_paillier_keypair(n_length=256)
        pk = paillier.PaillierPublicKey(phe_pk.n, phe_pk.g)
        ciphertext, proof = setproof.encrypt_among(pk, 454, _VALUES, _R)
        self.assertEqual(ciphertext.raw_value, phe_pk.raw_encrypt(454, r_value=_R))
        self.assertEqual(phe_sk.raw_decrypt(ciphertext.raw_value), 454)
        self.assertTrue(setproof.verify_among(pk, ciphertext.raw_value, proof, _VALUES))


if __name__ == '__main__':
    unittest.main()
