import time
import uuid

import pytest

from hypercopy.helpers import (
    EPSILON,
    INF_BPS,
    MAINNET_API_URL,
    TESTNET_API_URL,
    BaseUrl,
    bps_diff,
    float_to_string_for_hashing,
    generate_random_key,
    next_nonce,
    now_timestamp_ms,
    truncate_float,
    uuid_to_hex_string,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0.0, "0"),
        (-0.0, "0"),
        (-0.0000, "0"),
        (0.00076000, "0.00076"),
        (0.00000001, "0.00000001"),
        (0.12345678, "0.12345678"),
        (87654321.12345678, "87654321.12345678"),
        (987654321.00000000, "987654321"),
        (87654321.1234, "87654321.1234"),
        (0.000760, "0.00076"),
        (0.00076, "0.00076"),
        (987654321.0, "987654321"),
        (987654321.0, "987654321"),
    ],
)
def test_float_to_string_for_hashing(value, expected):
    assert float_to_string_for_hashing(value) == expected


def test_float_to_string_for_hashing_tiny_negative_is_zero():
    assert float_to_string_for_hashing(-0.000000001) == "0"


def test_base_url_values():
    assert BaseUrl.MAINNET.url() == MAINNET_API_URL
    assert BaseUrl.TESTNET.url() == TESTNET_API_URL
    assert BaseUrl.LOCALHOST.url().startswith("http")


def test_now_timestamp_ms_tracks_wall_clock():
    before = int(time.time() * 1000)
    now = now_timestamp_ms()
    after = int(time.time() * 1000)
    assert before - 1 <= now <= after + 1


def test_next_nonce_increments_by_one():
    first = next_nonce()
    second = next_nonce()
    assert second == first + 1


def test_next_nonce_is_near_current_time():
    nonce = next_nonce()
    assert abs(nonce - now_timestamp_ms()) < 300_000


def test_uuid_to_hex_string():
    value = uuid.UUID("12345678-1234-5678-1234-567812345678")
    assert uuid_to_hex_string(value) == "0x12345678123456781234567812345678"


def test_uuid_to_hex_string_zero_keeps_leading_zeros():
    assert uuid_to_hex_string(uuid.UUID(int=0)) == "0x" + "0" * 32


def test_generate_random_key_is_32_fresh_bytes():
    first = generate_random_key()
    second = generate_random_key()
    assert len(first) == 32
    assert first != second


def test_truncate_float_truncates_down():
    assert truncate_float(1.239, 2, False) == 1.23


def test_truncate_float_round_up_adds_one_unit():
    assert truncate_float(1.239, 2, True) == 1.24


def test_truncate_float_negative_saturates_to_zero():
    assert truncate_float(-5.5, 2, False) == 0.0


def test_bps_diff_zero_base_is_infinite():
    assert bps_diff(0.0, 5.0) == INF_BPS
    assert bps_diff(EPSILON / 2, 5.0) == INF_BPS


def test_bps_diff_half_difference():
    assert bps_diff(100.0, 150.0) == 5000
    assert bps_diff(100.0, 50.0) == 5000


def test_bps_diff_equal_values_is_zero():
    assert bps_diff(42.0, 42.0) == 0


def test_bps_diff_negative_base_saturates_to_zero():
    assert bps_diff(-100.0, 0.0) == 0