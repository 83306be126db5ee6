"""Seeded streams, hashing and name generation."""

import pytest

from galaxyho.models.rng import (
    CLUSTER_ADJECTIVES,
    CLUSTER_NOUNS,
    MASK32,
    Mulberry32,
    clamp,
    ease_in_out_cubic,
    gen_cluster_name,
    gen_star_name,
    hash_int,
    lerp,
    mulberry32,
    roman,
    round_half_up,
)


# ── Mulberry32 ──

@pytest.mark.parametrize("seed, expected", [
    (42, [0.6011037519201636, 0.44829055899754167, 0.8524657934904099]),
    (0, [0.26642920868471265, 0.0003297457005828619, 0.2232720274478197]),
    (123456789, [0.2577907438389957, 0.9707721115555614, 0.7853280142880976]),
    (-7, [0.43306733411736786, 0.32539576734416187, 0.5442695003002882]),
])
def test_mulberry32_known_sequences(seed, expected):
    rng = Mulberry32(seed)
    assert [rng.random() for _ in expected] == expected


def test_function_form_matches_class():
    fn = mulberry32(42)
    rng = Mulberry32(42)
    assert [fn() for _ in range(20)] == [rng.random() for _ in range(20)]


def test_same_seed_same_stream_different_seed_different_stream():
    a, b, c = Mulberry32(99), Mulberry32(99), Mulberry32(100)
    seq_a = [a.random() for _ in range(50)]
    assert seq_a == [b.random() for _ in range(50)]
    assert seq_a != [c.random() for _ in range(50)]


def test_values_stay_in_unit_interval():
    rng = Mulberry32(2024)
    for _ in range(5000):
        v = rng.random()
        assert 0.0 <= v < 1.0


def test_state_stays_32_bit():
    rng = Mulberry32(-1)
    assert rng.state == MASK32
    for _ in range(100):
        rng.random()
        assert 0 <= rng.state <= MASK32


def test_helpers_consume_one_draw_each():
    rng = Mulberry32(42)
    assert rng.randint(1, 6) == 4  # 1 + floor(0.6011 * 6)
    assert rng.index(10) == 4  # floor(0.4483 * 10)
    assert rng.uniform(0.0, 2.0) == pytest.approx(2 * 0.8524657934904099)


def test_randint_is_inclusive():
    rng = Mulberry32(5)
    seen = {rng.randint(2, 4) for _ in range(500)}
    assert seen == {2, 3, 4}


def test_shuffle_is_a_deterministic_permutation():
    items_a = list(range(30))
    items_b = list(range(30))
    Mulberry32(900).shuffle(items_a)
    Mulberry32(900).shuffle(items_b)
    assert items_a == items_b
    assert sorted(items_a) == list(range(30))
    assert items_a != list(range(30))


# ── hash_int ──

@pytest.mark.parametrize("a, b, expected", [
    (42, 0, 301225621),
    (42, 1, 2341978821),
    (0, 0, 0),
    (7, 3, 2634101403),
])
def test_hash_int_known_values(a, b, expected):
    assert hash_int(a, b) == expected


def test_hash_int_is_unsigned_32_bit_and_spreads():
    values = {hash_int(42, i) for i in range(1000)}
    assert len(values) == 1000
    assert all(0 <= v <= MASK32 for v in values)


# ── Numeric helpers ──

def test_round_half_up_rounds_halves_toward_positive_infinity():
    assert round_half_up(2.5) == 3
    assert round_half_up(3.5) == 4
    assert round_half_up(-2.5) == -2
    assert round_half_up(1.49) == 1


def test_lerp_clamp_and_easing():
    assert lerp(2, 6, 0.5) == 4
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert ease_in_out_cubic(0.0) == 0.0
    assert ease_in_out_cubic(0.5) == pytest.approx(0.5)
    assert ease_in_out_cubic(1.0) == pytest.approx(1.0)


# ── Names ──

def test_star_names_are_deterministic():
    assert gen_star_name(hash_int(42, 0)) == "Tauor"
    assert gen_star_name(7) == "Alpha"
    assert gen_star_name(1234) == gen_star_name(1234)


def test_cluster_name():
    assert gen_cluster_name(42) == "Cobalt Deep"
    adjective, noun = gen_cluster_name(777).split(" ")
    assert adjective in CLUSTER_ADJECTIVES
    assert noun in CLUSTER_NOUNS


def test_roman_numerals():
    assert roman(0) == "I"
    assert roman(3) == "IV"
    assert roman(9) == "X"
    assert roman(10) == "11"
