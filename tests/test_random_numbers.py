from optima.random_numbers import NormalRandom, UniformRandom


def test_uniform_in_range():
    rnd = UniformRandom(2.0, 5.0, seed=7)
    values = [rnd.generate() for _ in range(1000)]
    assert all(2.0 <= v < 5.0 for v in values)
    assert max(values) - min(values) > 2.0


def test_uniform_seed_is_deterministic():
    a = UniformRandom(0, 1, seed=42)
    b = UniformRandom(0, 1, seed=42)
    assert [a.generate() for _ in range(10)] == [b.generate() for _ in range(10)]


def test_normal_always_positive():
    rnd = NormalRandom(0.1, 5.0, seed=3)
    assert all(rnd.generate() > 0 for _ in range(1000))


def test_normal_seed_is_deterministic():
    a = NormalRandom(100, 10, seed=5)
    b = NormalRandom(100, 10, seed=5)
    assert [a.generate() for _ in range(10)] == [b.generate() for _ in range(10)]


def test_normal_centred_on_mean():
    rnd = NormalRandom(1000, 10, seed=11)
    values = [rnd.generate() for _ in range(2000)]
    assert abs(sum(values) / len(values) - 1000) < 5