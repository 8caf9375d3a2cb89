import unittest
import hashlib
from Crypto.Hash import keccak as reference_keccak
from tron3.core import cryptography
from tron3.core.cryptography import keccakhash

MSG_56 = b"abcdbcdecdefdefgefghfghighijhijkijkljklmklmnlmnomnopnopq"

# published Keccak test vectors for the empty string, "abc" and the 56 byte message
vectors = {
    224: [
        "f71837502ba8e10837bdd8d365adb85591895602fc552b48b7390abd",
        "c30411768506ebe1c2871b1ee2e87d38df342317300a9b97a95ec6a8",
        "e51faa2b4655150b931ee8d700dc202f763ca5f962c529eae55012b6",
    ],
    256: [
        "c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470",
        "4e03657aea45a94fc7d47ba826c8d667c0d1e6e33a64a036ec44f58fa12d6c45",
        "45d3b367a6904e6e8d502ee04999a7c27647f91fa845d456525fd352ae3d7371",
    ],
    384: [
        "2c23146a63a29acf99e73b88f8c24eaa7dc60aa771780ccc006afbfa8fe2479b2dd2b21362337441ac12b515911957ff",
        "f7df1165f033337be098e7d288ad6a2f74409d7a60b49c36642218de161b1f99f8c681e4afaf31a34db29fb763e3c28e",
        "b41e8896428f1bcbb51e17abd6acc98052a3502e0d5bf7fa1af949b4d3c855e7c4dc2c390326b3f3e74c7b1e2b9a3657",
    ],
    512: [
        "0eab42de4c3ceb9235fc91acffe746b29c29a8c366b7c60e4e67c466f36a4304c00fa9caf9d87976ba469bcbe06713b435f091ef2769fb160cdab33d3670680e",
        "18587dc2ea106b9a1563e32b3312421ca164c7f1f07bc922a9c83d77cea3a1e5d0c69910739025372dc14ac9642629379540c17e2a65b19d77aa511a9d00bb96",
        "6aa6d3669597df6d5a007b00d09c20795b5c4218234e1698a944757a488ecdc09965435d97ca32c3cfed7201ff30e070cd947f1fc12b9d9214c467d342bcba5d",
    ],
}


class KeccakTestCase(unittest.TestCase):
    def test_official_vectors(self):
        for bits, expected in vectors.items():
            for msg, digest in zip([b"", b"abc", MSG_56], expected):
                self.assertEqual(digest, keccakhash.keccak(msg, bits).hex(), f"{bits} {msg}")

    def test_output_length(self):
        for bits in keccakhash.SUPPORTED_OUTPUT_BITS:
            self.assertEqual(bits // 4, len(keccakhash.keccak(b"tron", bits).hex()))

    def test_default_is_256(self):
        self.assertEqual(keccakhash.keccak256(b"abc"), keccakhash.keccak(b"abc"))
        self.assertEqual(vectors[256][1], cryptography.keccak256(b"abc").hex())

    def test_unsupported_output_size(self):
        for bits in [0, 128, 255, 257, 1024]:
            with self.assertRaises(keccakhash.UnsupportedOutputSize) as context:
                keccakhash.keccak(b"", bits)
            self.assertIn(f"Unsupported Keccak output size {bits}", str(context.exception))

    def test_unsupported_output_size_is_value_error(self):
        with self.assertRaises(ValueError):
            keccakhash.KeccakHash(output_bits=160)

    def test_block_boundaries_match_reference(self):
        # exercise padding with messages around the rate of every width
        for bits in keccakhash.SUPPORTED_OUTPUT_BITS:
            rate = 200 - 2 * (bits // 8)
            for length in [rate - 2, rate - 1, rate, rate + 1, 2 * rate, 2 * rate + 7]:
                msg = bytes(range(256)) * (length // 256) + bytes(range(length % 256))
                expected = reference_keccak.new(digest_bits=bits, data=msg).digest()
                self.assertEqual(expected, keccakhash.keccak(msg, bits), f"{bits} {length}")

    def test_incremental_update(self):
        h = keccakhash.KeccakHash(output_bits=256)
        for chunk in [MSG_56[:3], MSG_56[3:40], b"", MSG_56[40:]]:
            h.update(chunk)
        self.assertEqual(vectors[256][2], h.hexdigest())

    def test_incremental_update_large(self):
        msg = b"a" * 1000
        h = keccakhash.KeccakHash(output_bits=512)
        for i in range(0, len(msg), 33):
            h.update(msg[i : i + 33])
        self.assertEqual(keccakhash.keccak(msg, 512), h.digest())

    def test_digest_does_not_finalize(self):
        h = keccakhash.KeccakHash(b"ab")
        first = h.digest()
        self.assertEqual(first, h.digest())
        h.update(b"c")
        self.assertEqual(vectors[256][1], h.hexdigest())

    def test_copy(self):
        h = keccakhash.KeccakHash(b"ab", 384)
        h2 = h.copy()
        h2.update(b"c")
        self.assertEqual(vectors[384][1], h2.hexdigest())
        self.assertEqual(keccakhash.keccak(b"ab", 384), h.digest())

    def test_hash_object_properties(self):
        h = keccakhash.KeccakHash(output_bits=256)
        self.assertEqual("keccak-256", h.name)
        self.assertEqual(32, h.digest_size)
        self.assertEqual(136, h.block_size)

    def test_differs_from_sha3(self):
        self.assertNotEqual(hashlib.sha3_256(b"").digest(), keccakhash.keccak(b"", 256))

    def test_selector(self):
        self.assertEqual(
            "a9059cbb", keccakhash.keccak256(b"transfer(address,uint256)")[:4].hex()
        )

    def test_package_exports(self):
        # the re-exported function must not hide the module it lives in
        self.assertTrue(callable(cryptography.keccak))
        self.assertIs(keccakhash.keccak, cryptography.keccak)
        self.assertIs(keccakhash.KeccakHash, cryptography.KeccakHash)
        self.assertEqual(
            keccakhash.keccak256(b"abc"), cryptography.keccak(b"abc", 256)
        )


class ShakeTestCase(unittest.TestCase):
    def test_empty_vectors(self):
        self.assertEqual(
            "7f9c2ba4e88f827d616045507605853ed73b8093f6efbc88eb1a6eacfa66ef26",
            keccakhash.shake(b"", 128, 256).hex(),
        )
        self.assertEqual(
            "46b9dd2b0ba88d13233b3feb743eeb243fcd52ea62b81b82b50c27646ed5762fd75dc4ddd8c0f200cb05019d67b592f6fc821c49479ab48640292eacb3b7c4be",
            keccakhash.shake(b"", 256, 512).hex(),
        )

    def test_abc_vectors(self):
        self.assertEqual(
            "5881092dd818bf5cf8a3ddb793fbcba74097d5c526a6d35f97b83351940f2cc8",
            keccakhash.shake(b"abc", 128, 256).hex(),
        )
        self.assertEqual(
            "483366601360a8771c6863080cc4114d8db44530f8f1e1ee4f94ea37e78b5739d5a15bef186a5386c75744c0527e1faa9f8726e462a12a4feb06bd8801e751e4",
            keccakhash.shake(b"abc", 256, 512).hex(),
        )

    def test_matches_hashlib(self):
        msg = b"x" * 300
        for bits in [8, 256, 1344, 4000]:
            self.assertEqual(
                hashlib.shake_128(msg).digest(bits // 8), keccakhash.shake(msg, 128, bits)
            )
            self.assertEqual(
                hashlib.shake_256(msg).digest(bits // 8), keccakhash.shake(msg, 256, bits)
            )

    def test_longer_output_extends_shorter(self):
        short = keccakhash.shake(b"tron", 128, 128)
        long = keccakhash.shake(b"tron", 128, 2048)
        self.assertEqual(short, long[:16])

    def test_unsupported_security_level(self):
        with self.assertRaises(keccakhash.UnsupportedOutputSize) as context:
            keccakhash.shake(b"", 512, 256)
        self.assertIn("Unsupported SHAKE security level 512", str(context.exception))

    def test_invalid_output_length(self):
        for bits in [0, -8, 12]:
            with self.assertRaises(keccakhash.UnsupportedOutputSize) as context:
                keccakhash.shake(b"", 128, bits)
            self.assertIn("positive multiple of 8 bits", str(context.exception))

    def test_incremental(self):
        s = keccakhash.Shake(security_level=256)
        s.update(b"ab")
        s2 = s.copy()
        s2.update(b"c")
        self.assertEqual(keccakhash.shake(b"abc", 256, 512), s2.digest(64))
        self.assertEqual("shake_256", s.name)
        with self.assertRaises(ValueError):
            s.digest(-1)
