import time

import pytest

from stratumpool.job import (
    Job,
    height_to_big_endian_bytes,
    job_id,
    nano_to_big_endian_bytes,
    new_job,
)

HEADER_A = ("0700000093bdee7083c6e02147cf76724a685f0148636"
            "b2faf96353d1cbf5c0a954100007991153ad03eb0e31ead44b75ebc9f760870098431d4e6"
            "aa85e742cbad517ebd853b9bf059e8eeb91591e4a7d4005acc62e92bfd27b17309a5a41dd"
            "24016428f0100000000000000000000003c000000dd742920204e00000000000038000000"
            "66010000f171cc5d000000000000000000000000000000000000000000000000000000000"
            "000000000000000000000008000000100000000000005a0")


def test_height_bytes_pinned():
    assert height_to_big_endian_bytes(56) == b"\x00\x00\x00\x38"


def test_height_bytes_round_trip():
    for height in (0, 1, 57, 2**32 - 1):
        encoded = height_to_big_endian_bytes(height)
        assert len(encoded) == 4
        assert int.from_bytes(encoded, "big") == height


@pytest.mark.parametrize("height", [-1, 2**32])
def test_height_out_of_range(height):
    with pytest.raises(ValueError):
        height_to_big_endian_bytes(height)


def test_nano_bytes_round_trip():
    now = time.time_ns()
    encoded = nano_to_big_endian_bytes(now)
    assert len(encoded) == 8
    assert int.from_bytes(encoded, "big") == now


def test_nano_bytes_negative_wraps():
    assert nano_to_big_endian_bytes(-1) == b"\xff" * 8


def test_job_id_layout():
    before = time.time_ns()
    jid = job_id(56)
    after = time.time_ns()
    assert len(jid) == 24
    assert jid[:8] == height_to_big_endian_bytes(56).hex()
    stamp = int.from_bytes(bytes.fromhex(jid[8:]), "big")
    assert before <= stamp <= after


def test_new_job_fields():
    job = new_job(HEADER_A, 56)
    assert isinstance(job, Job)
    assert job.header == HEADER_A
    assert job.height == 56
    assert job.uuid[:8] == height_to_big_endian_bytes(56).hex()


def test_jobs_at_different_heights_differ():
    job_a = new_job(HEADER_A, 56)
    job_b = new_job(HEADER_A, 57)
    assert job_a.uuid[:8] != job_b.uuid[:8]