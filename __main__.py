#!/usr/bin/env python3
"""Demonstration of the set membership proofs

Encrypt a value, prove that it is one of a public list of candidates, and
verify the proof (as a third party would, from the public key alone).
"""
import json
import random
import argparse
import datetime

import paillier
import setproof

# debug_level = 0: quiet
# debug_level = 1: normal output
# debug_level = 2: some intermediate values
# debug_level = 3: detailed intermediate values
debug_level = 1


def load_keypair(args):
    if args.key_cache is None:
        pk, sk = paillier.generate_paillier_keypair(args.bits)
        if debug_level >= 1:
            print('Keys generated')
        return pk, sk

    # load cached keys or generate new ones
    try:
        with open(args.key_cache) as f:
            data = json.load(f)
    except (FileNotFoundError, json.decoder.JSONDecodeError):
        pk, sk = paillier.generate_paillier_keypair(args.bits)
        with open(args.key_cache, 'w') as f:
            json.dump({'p': sk.p, 'q': sk.q, 'g': pk.g}, f)
        if debug_level >= 1:
            print('Keys generated')
    else:
        sk = paillier.PaillierSecretKey(data['p'], data['q'], data['g'])
        pk = sk.public_key
        if debug_level >= 1:
            print('Keys loaded')
    return pk, sk


def run_demo(pk, sk, plaintext, values, security_bits):
    r = random.SystemRandom().randrange(1, pk.n)

    start = datetime.datetime.now()
    ciphertext, proof = setproof.encrypt_among(pk, plaintext, values, r, security_bits)
    elapsed = datetime.datetime.now() - start
    if debug_level >= 1:
        print('Proof generated in {}'.format(elapsed))
    if debug_level >= 2:
        print('c =', ciphertext.raw_value)
    if debug_level >= 3:
        a, e, z = proof
        print('a =', a)
        print('e =', e)
        print('z =', z)

    # send ciphertext and proof to the verifier

    start = datetime.datetime.now()
    result = setproof.verify_among(pk, ciphertext.raw_value, proof, values)
    elapsed = datetime.datetime.now() - start
    if debug_level >= 1:
        print('Proof verified in {}'.format(elapsed))
        print('Is the plaintext in {}? {}'.format(values, result))
    if debug_level >= 2:
        print('Decrypted plaintext:', sk.decrypt(ciphertext))
    return result


def main():
    parser = argparse.ArgumentParser()
    parser.description = 'Prove that a Paillier ciphertext encrypts one of a set of values'
    parser.add_argument('--debug', '-d', default=1, type=int)
    parser.add_argument('--bits', '-b', default=2048, type=int)
    parser.add_argument('--security', '-s', default=setproof.DEFAULT_SECURITY_BITS, type=int)
    parser.add_argument('--values', nargs='+', default=[41, 48468, 15, 454, 184], type=int)
    parser.add_argument('--key-cache')
    parser.add_argument('plaintext', default=15, type=int, nargs='?')
    args = parser.parse_args()

    global debug_level
    debug_level = args.debug

    if args.plaintext not in args.values:
        parser.error('{} is not one of {}'.format(args.plaintext, args.values))

    pk, sk = load_keypair(args)
    if not run_demo(pk, sk, args.plaintext, args.values, args.security):
        raise SystemExit(1)


if __name__ == '__main__':
    main()
