import time
from fractions import Fraction

from stratumpool.hashdata import HashData, hash_data_id, new_hash_data
from stratumpool.minerid import CPU

EXTRA_NONCE1 = "ca750c60"
IP = "127.0.0.1:5550"
ACCOUNT_X = "account-x"
ACCOUNT_Y = "account-y"


def test_hash_data_id_concatenates_nonce_then_account():
    assert hash_data_id(ACCOUNT_X, EXTRA_NONCE1) == EXTRA_NONCE1 + ACCOUNT_X


def test_hash_data_id_differs_per_account():
    assert hash_data_id(ACCOUNT_X, EXTRA_NONCE1) != hash_data_id(
        ACCOUNT_Y, EXTRA_NONCE1)


def test_new_hash_data_fields():
    rate = Fraction(100)
    before = time.time_ns()
    data = new_hash_data(CPU, ACCOUNT_X, IP, EXTRA_NONCE1, rate)
    after = time.time_ns()
    assert isinstance(data, HashData)
    assert data.uuid == hash_data_id(ACCOUNT_X, EXTRA_NONCE1)
    assert data.account_id == ACCOUNT_X
    assert data.miner == CPU
    assert data.ip == IP
    assert data.hash_rate == Fraction(100)
    assert before <= data.updated_on <= after


def test_hash_data_update():
    data = new_hash_data(CPU, ACCOUNT_X, IP, EXTRA_NONCE1, Fraction(100))
    original = data.updated_on
    data.updated_on = original + 100
    assert data.updated_on - original == 100