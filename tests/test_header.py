import pytest

from stratumpool.header import (
    BlockHeader,
    generate_block_header,
    generate_solved_block_header,
)
from stratumpool.message import ErrorKind, MessageError
from stratumpool.minerid import CPU, GOMINER

WORK = (
    "07000000ddb9fb70cb6ed184f57bfb94abebe7e7b9819e27d6e3ca819f"
    "1f73c7218100007de69dd9365ba5a39178870780d78d86aa6d53a649a54bd65faac4"
    "be8123253e7f98f31055b0f3e94dd48e67f43742b028623192dd684d053d6681759c"
    "8ebfa70100000000000000000000003c00000045bc4d20204e000000000000390000"
    "00b3060000a912825e00000000000000000000000000000000000000000000000000"
    "0000000000000000000000000000008000000100000000000005a0"
)
EXTRA_NONCE1 = "ca750c60"


def test_header_round_trip():
    raw = bytes.fromhex(WORK[:360])
    header = BlockHeader.from_bytes(raw)
    assert header.to_bytes() == raw


def test_header_fields_from_work():
    header = BlockHeader.from_bytes(bytes.fromhex(WORK[:360]))
    assert header.version == 7
    assert header.height == 57
    assert header.prev_block == bytes.fromhex(WORK[8:72])
    assert header.bits.to_bytes(4, "little") == bytes.fromhex(WORK[232:240])


def test_from_bytes_ignores_trailing_padding():
    full = BlockHeader.from_bytes(bytes.fromhex(WORK))
    trimmed = BlockHeader.from_bytes(bytes.fromhex(WORK[:360]))
    assert full == trimmed


def test_from_bytes_rejects_short_data():
    with pytest.raises(ValueError):
        BlockHeader.from_bytes(bytes.fromhex(WORK[:358]))


def test_header_rejects_wrong_field_length():
    header = BlockHeader.from_bytes(bytes.fromhex(WORK[:360]))
    with pytest.raises(ValueError, match="extra_data"):
        BlockHeader(**{**header.__dict__, "extra_data": b"\x00" * 31})


def test_generate_block_header_inserts_extra_nonce1():
    header = generate_block_header(WORK[:8], WORK[8:72], WORK[72:360],
                                   EXTRA_NONCE1)
    assert header.extra_data[:4] == bytes.fromhex(EXTRA_NONCE1)
    expected = WORK[:288] + EXTRA_NONCE1 + WORK[296:360]
    assert header.to_bytes().hex() == expected


def test_generate_block_header_short_gen_tx1():
    with pytest.raises(MessageError) as info:
        generate_block_header(WORK[:8], WORK[8:72], WORK[72:359], EXTRA_NONCE1)
    assert info.value.kind is ErrorKind.DECODE


def test_generate_block_header_invalid_hex():
    with pytest.raises(MessageError) as info:
        generate_block_header("zz000000", WORK[8:72], WORK[72:360],
                              EXTRA_NONCE1)
    assert info.value.kind is ErrorKind.DECODE


def test_generate_block_header_too_short_for_header():
    with pytest.raises(MessageError) as info:
        generate_block_header("", "", WORK[72:360], EXTRA_NONCE1)
    assert info.value.kind is ErrorKind.HEADER_INVALID


@pytest.mark.parametrize("miner", [CPU, GOMINER])
def test_generate_solved_block_header(miner):
    n_time = "b1c2d3e4"
    nonce = "01020304"
    extra_nonce2 = "0a0b0c0d"
    header = generate_solved_block_header(WORK, EXTRA_NONCE1, extra_nonce2,
                                          n_time, nonce, miner)
    encoded = header.to_bytes().hex()
    assert encoded[272:280] == n_time
    assert encoded[280:288] == nonce
    assert encoded[288:296] == EXTRA_NONCE1
    assert encoded[296:304] == extra_nonce2
    assert encoded[:272] == WORK[:272]
    assert encoded[304:] == WORK[304:360]
    assert header.timestamp == int.from_bytes(bytes.fromhex(n_time), "little")


def test_generate_solved_block_header_unknown_miner():
    with pytest.raises(MessageError) as info:
        generate_solved_block_header(WORK, EXTRA_NONCE1, "00000000",
                                     "00000000", "00000000", "someminer")
    assert info.value.kind is ErrorKind.MINER_UNKNOWN


def test_generate_solved_block_header_invalid_hex():
    with pytest.raises(MessageError) as info:
        generate_solved_block_header(WORK, EXTRA_NONCE1, "00000000",
                                     "00000000", "zzzzzzzz", CPU)
    assert info.value.kind is ErrorKind.DECODE


def test_generate_solved_block_header_short_header():
    with pytest.raises(MessageError) as info:
        generate_solved_block_header(WORK[:300], EXTRA_NONCE1, "00000000",
                                     "00000000", "00000000", CPU)
    assert info.value.kind is ErrorKind.DECODE


def test_generate_solved_block_header_truncated_before_header_end():
    with pytest.raises(MessageError) as info:
        generate_solved_block_header(WORK[:320], EXTRA_NONCE1, "00000000",
                                     "00000000", "00000000", CPU)
    assert info.value.kind is ErrorKind.PARSE