import pytest

from game_rng import GameRNG


def test_same_seed_same_sequence():
    a = GameRNG(seed=123)
    b = GameRNG(seed=123)
    assert [a.get_int(0, 100) for _ in range(20)] == [
        b.get_int(0, 100) for _ in range(20)
    ]


def test_get_int_is_inclusive():
    rng = GameRNG(seed=5)
    values = {rng.get_int(1, 3) for _ in range(200)}
    assert values == {1, 2, 3}
    assert rng.get_int(4, 4) == 4


def test_get_int_rejects_reversed_range():
    with pytest.raises(ValueError):
        GameRNG(seed=1).get_int(3, 2)


def test_shuffle_is_deterministic_permutation():
    first = list(range(10))
    second = list(range(10))
    GameRNG(seed=7).shuffle(first)
    GameRNG(seed=7).shuffle(second)
    assert first == second
    assert sorted(first) == list(range(10))


def test_choice():
    rng = GameRNG(seed=3)
    assert rng.choice(["only"]) == "only"
    with pytest.raises(ValueError):
        rng.choice([])


def test_unseeded_rng_records_its_seed():
    rng = GameRNG()
    replay = GameRNG(seed=rng.initial_seed)
    assert [rng.get_int(0, 1000) for _ in range(5)] == [
        replay.get_int(0, 1000) for _ in range(5)
    ]
