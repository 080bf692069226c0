"""Tests for the AES counter-mode cipher."""

import pytest
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from fortuna.cipher import AesCounterCipher
from fortuna.errors import InvalidArgumentError, UnexpectedError

KEY = bytes(range(32))


def _aes_block(key: bytes, counter: int) -> bytes:
    enc = Cipher(algorithms.AES(key), modes.ECB()).encryptor()
    return enc.update(counter.to_bytes(16, "little"))


class TestAesCounterCipher:
    def test_sizes(self):
        c = AesCounterCipher()
        assert c.key_size == 32
        assert c.block_size == 16

    @pytest.mark.parametrize("size", [0, 8, 20, 64])
    def test_invalid_key_size(self, size):
        with pytest.raises(InvalidArgumentError):
            AesCounterCipher(size)

    def test_wrong_key_length(self):
        c = AesCounterCipher()
        with pytest.raises(InvalidArgumentError):
            c.set_key(bytes(16))

    def test_encrypt_before_key(self):
        c = AesCounterCipher()
        c.init()
        with pytest.raises(UnexpectedError):
            c.encrypt_counter(bytearray(16), 0)

    def test_encrypts_little_endian_counter(self):
        c = AesCounterCipher()
        c.init()
        c.set_key(KEY)
        c.increment_counter()
        buf = bytearray(20)
        c.encrypt_counter(buf, 2)
        assert bytes(buf[2:18]) == _aes_block(KEY, 1)
        assert buf[:2] == b"\x00\x00"
        assert buf[18:] == b"\x00\x00"

    def test_counter_wraps(self):
        c = AesCounterCipher()
        c.set_key(KEY)
        c._counter = (1 << 128) - 1
        c.increment_counter()
        assert c.counter == 0

    def test_reset_forgets_key(self):
        c = AesCounterCipher()
        c.set_key(KEY)
        c.increment_counter()
        c.reset()
        assert c.counter == 0
        with pytest.raises(UnexpectedError):
            c.encrypt_counter(bytearray(16), 0)

    def test_clone_is_independent(self):
        c = AesCounterCipher()
        c.set_key(KEY)
        c.increment_counter()
        copy = c.clone()
        c.increment_counter()
        a, b = bytearray(16), bytearray(16)
        copy.encrypt_counter(a, 0)
        c.encrypt_counter(b, 0)
        assert bytes(a) == _aes_block(KEY, 1)
        assert bytes(b) == _aes_block(KEY, 2)

    def test_aes128(self):
        c = AesCounterCipher(16)
        c.set_key(KEY[:16])
        buf = bytearray(16)
        c.encrypt_counter(buf, 0)
        assert bytes(buf) == _aes_block(KEY[:16], 0)
