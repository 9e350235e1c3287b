"""
Test vector operations module
"""

import numpy as np
import pytest
from hyperdimensional.hypervectors import BinaryHV, BipolarHV, TernaryHV, RealHV, GradedHV, GradedBipolarHV
from hyperdimensional.vector_operations import (
    grad2bipol, bipol2grad, three_pi, fuzzy_xor, three_pi_bipolar, fuzzy_xor_bipolar,
    bundle, bind, shift, shift_inplace, random_mask, perturbate, perturbate_inplace
)
from hyperdimensional.similarity import cosine_similarity, similarity
from hyperdimensional.error_handling import DimensionMismatch, InsufficientInput, VariantMismatch

ALL_TYPES = [BinaryHV, BipolarHV, TernaryHV, RealHV, GradedHV, GradedBipolarHV]


def test_scalar_combinators():
    """Test the graded scalar combinators"""
    assert grad2bipol(0.0) == -1.0
    assert bipol2grad(1.0) == 1.0
    assert bipol2grad(grad2bipol(0.3)) == pytest.approx(0.3)

    # 0.5 is neutral for three_pi
    assert three_pi(0.5, 0.7) == pytest.approx(0.7)
    assert three_pi(0.8, 0.8) == pytest.approx(0.64 / 0.68)
    # Maximal disagreement
    assert three_pi(0.0, 1.0) == 0.0
    assert three_pi(1.0, 0.0) == 0.0

    assert fuzzy_xor(0.2, 0.5) == pytest.approx(0.5)
    assert fuzzy_xor(1.0, 0.0) == pytest.approx(1.0)
    assert fuzzy_xor(1.0, 1.0) == pytest.approx(0.0)

    assert three_pi_bipolar(0.0, 0.4) == pytest.approx(0.4)
    assert fuzzy_xor_bipolar(0.5, -0.4) == pytest.approx(0.2)


def test_scalar_combinators_are_vectorised():
    """Test the combinators work element-wise on arrays"""
    x = np.array([0.2, 0.9, 0.0])
    y = np.array([0.5, 0.9, 1.0])
    result = three_pi(x, y)
    assert isinstance(result, np.ndarray)
    assert result.tolist() == pytest.approx([0.2, 0.81 / 0.82, 0.0])

    xb = np.array([-0.5, 0.3])
    yb = np.array([0.8, -1.0])
    assert fuzzy_xor_bipolar(xb, yb).tolist() == pytest.approx((-xb * yb).tolist())


def test_bundle_majority_odd():
    """Test odd-sized binary bundles take the per-dimension majority"""
    rng = np.random.default_rng(0)
    vectors = [BinaryHV.random(1000, rng) for _ in range(5)]
    result = bundle(vectors)

    counts = np.sum([hv.data for hv in vectors], axis=0)
    assert result.tolist() == (counts > 2.5).tolist()


def test_bundle_bipolar_majority():
    """Test bipolar bundles follow the sign of the sum"""
    rng = np.random.default_rng(1)
    vectors = [BipolarHV.random(1000, rng) for _ in range(3)]
    result = bundle(vectors)

    total = np.sum([hv.values for hv in vectors], axis=0)
    assert result.tolist() == np.sign(total).tolist()


def test_bundle_even_tie_break():
    """Test even-sized bundles break ties per dimension, reproducibly"""
    rng = np.random.default_rng(2)
    a, b = BinaryHV.random(1000, rng), BinaryHV.random(1000, rng)

    result = bundle([a, b], rng=np.random.default_rng(10))
    assert result == bundle([a, b], rng=np.random.default_rng(10))

    # Agreement is kept, disagreements are split between both inputs
    agree = a.data == b.data
    assert np.array_equal(result.data[agree], a.data[agree])
    from_a = np.count_nonzero(result.data[~agree] == a.data[~agree])
    assert 0 < from_a < np.count_nonzero(~agree)


def test_bundle_ternary_sum():
    """Test ternary bundles sum without clamping by default"""
    hv = TernaryHV([1, 1, 0, -1])
    other = TernaryHV([1, -1, 0, -1])
    assert bundle([hv, hv, other]).tolist() == [3, 1, 0, -3]
    assert bundle([hv, hv, other], normalize=True).tolist() == [1, 1, 0, -1]


def test_bundle_real():
    """Test real bundles are sums scaled by 1/sqrt(m)"""
    result = bundle([RealHV([1.0, 2.0]), RealHV([3.0, 4.0])])
    assert result.tolist() == pytest.approx([4 / np.sqrt(2), 6 / np.sqrt(2)])


def test_bundle_graded():
    """Test graded bundles fold three_pi left to right"""
    result = bundle([GradedHV([0.8, 0.0, 0.5]), GradedHV([0.8, 1.0, 0.3])])
    assert result.tolist() == pytest.approx([0.64 / 0.68, 0.0, 0.3])

    third = GradedHV([0.5, 0.5, 0.9])
    folded = bundle([GradedHV([0.8, 0.0, 0.5]), GradedHV([0.8, 1.0, 0.3]), third])
    assert folded.tolist() == pytest.approx(three_pi(result.values, third.values).tolist())

    bipolar = bundle([GradedBipolarHV([0.0, 0.6]), GradedBipolarHV([0.4, 0.6])])
    assert bipolar.tolist() == pytest.approx([0.4, three_pi_bipolar(0.6, 0.6)])


def test_bundle_single_vector():
    """Test bundling a single vector returns an equal copy"""
    hv = GradedHV.random(20, 3)
    result = bundle([hv])
    assert result == hv
    assert result is not hv


@pytest.mark.parametrize("cls", ALL_TYPES)
def test_bundle_similar_to_inputs(cls):
    """Test bundles are more similar to their inputs than to random vectors"""
    rng = np.random.default_rng(4)
    a, b, c, d = (cls.random(10_000, rng) for _ in range(4))
    result = bundle([a, b, c], rng=rng)
    assert similarity(result, a) > similarity(result, d)


def test_bundle_errors():
    """Test bundle input validation"""
    with pytest.raises(InsufficientInput):
        bundle([])
    with pytest.raises(VariantMismatch):
        bundle([BinaryHV.random(10, 0), BipolarHV.random(10, 0)])
    with pytest.raises(DimensionMismatch):
        bundle([BinaryHV.random(10, 0), BinaryHV.random(12, 0)])


def test_bundle_does_not_mutate():
    """Test bundle leaves its inputs untouched"""
    a, b, c = (TernaryHV.random(50, seed) for seed in range(3))
    bundle([a, b, c])
    assert a == TernaryHV.random(50, 0)


def test_operators():
    """Test + and * sugar"""
    a, b = TernaryHV.random(100, 0), TernaryHV.random(100, 1)
    assert a + b == bundle([a, b])
    assert a * b == bind(a, b)

    with pytest.raises(TypeError):
        a + 1


@pytest.mark.parametrize("cls", [BinaryHV, BipolarHV, TernaryHV])
def test_bind_self_inverse(cls):
    """Test binding twice with the same vector recovers the other operand"""
    rng = np.random.default_rng(5)
    a, b = cls.random(1000, rng), cls.random(1000, rng)
    assert bind(bind(a, b), a) == b


def test_bind_self_inverse_real():
    """Test real binding inverts approximately"""
    rng = np.random.default_rng(6)
    a, b = RealHV.random(10_000, rng), RealHV.random(10_000, rng)
    recovered = bind(bind(a, b), a)
    assert cosine_similarity(recovered, b) > 0.4


@pytest.mark.parametrize("cls", [BinaryHV, BipolarHV])
def test_bind_with_itself_is_neutral(cls):
    """Test x ⊗ x is the binding identity"""
    hv = cls.random(100, 7)
    assert bind(hv, hv) == hv.similar()


def test_bind_values():
    """Test per-variant binding semantics"""
    assert bind(BinaryHV([1, 1, 0]), BinaryHV([1, 0, 0])).tolist() == [False, True, False]
    assert bind(BipolarHV([1, -1, -1]), BipolarHV([-1, -1, 1])).tolist() == [-1, 1, -1]
    assert bind(TernaryHV([1, 0, -1]), TernaryHV([-1, 1, -1])).tolist() == [-1, 0, 1]
    assert bind(RealHV([2.0, -1.5]), RealHV([0.5, 2.0])).tolist() == pytest.approx([1.0, -3.0])
    assert bind(GradedHV([0.2, 1.0]), GradedHV([0.5, 0.0])).tolist() == pytest.approx([0.5, 1.0])
    assert bind(GradedBipolarHV([0.5, -1.0]), GradedBipolarHV([-0.4, -1.0])).tolist() == pytest.approx([0.2, -1.0])


@pytest.mark.parametrize("cls", [BipolarHV, TernaryHV, RealHV])
def test_bind_dissimilar_to_inputs(cls):
    """Test bound vectors are quasi-orthogonal to their operands"""
    rng = np.random.default_rng(8)
    a, b = cls.random(10_000, rng), cls.random(10_000, rng)
    bound = bind(a, b)
    assert abs(cosine_similarity(bound, a)) < 0.05
    assert abs(cosine_similarity(bound, b)) < 0.05


def test_bind_collection():
    """Test binding a collection folds pairwise in order"""
    rng = np.random.default_rng(9)
    a, b, c = (BipolarHV.random(100, rng) for _ in range(3))
    assert bind([a, b, c]) == bind(bind(a, b), c)
    assert bind([a]) == a

    with pytest.raises(InsufficientInput):
        bind([])


def test_bind_errors():
    """Test bind operand validation"""
    with pytest.raises(VariantMismatch):
        bind(BinaryHV.random(10, 0), BipolarHV.random(10, 0))
    with pytest.raises(DimensionMismatch):
        bind(RealHV.random(10, 0), RealHV.random(11, 0))
    with pytest.raises(VariantMismatch):
        bind([GradedHV.random(10, 0), GradedBipolarHV.random(10, 0)])


def test_shift():
    """Test cyclic shifts"""
    hv = BinaryHV([1, 0, 0, 0])
    assert shift(hv).tolist() == [False, True, False, False]
    assert shift(hv, 2).tolist() == [False, False, True, False]
    assert shift(hv, -1).tolist() == [False, False, False, True]
    assert hv.shift(4) == hv

    # shift returns a new vector
    assert hv.tolist() == [True, False, False, False]


@pytest.mark.parametrize("cls", ALL_TYPES)
@pytest.mark.parametrize("k", [1, 3, -7, 250])
def test_shift_round_trip(cls, k):
    """Test shifting back by -k restores the vector"""
    hv = cls.random(100, 11)
    assert shift(shift(hv, k), -k) == hv


def test_shift_inplace():
    """Test the in-place shift mutates and returns its argument"""
    hv = BipolarHV([1, -1, -1])
    result = shift_inplace(hv)
    assert result is hv
    assert hv.tolist() == [-1, 1, -1]


def test_shift_distributes_over_bundle_and_bind():
    """Test shift commutes with bundle and bind"""
    rng = np.random.default_rng(12)
    a, b, c = (BinaryHV.random(200, rng) for _ in range(3))
    assert shift(bundle([a, b, c]), 3) == bundle([shift(a, 3), shift(b, 3), shift(c, 3)])
    assert shift(bind(a, b), 3) == bind(shift(a, 3), shift(b, 3))


def test_shift_quasi_orthogonal():
    """Test differently shifted vectors are dissimilar"""
    hv = BipolarHV.random(10_000, 13)
    assert abs(cosine_similarity(shift(hv, 1), shift(hv, 2))) < 0.05


def test_random_mask():
    """Test the selection forms of a perturbation mask"""
    rng = np.random.default_rng(14)
    assert np.count_nonzero(random_mask(1000, 0.1, rng)) == 100
    assert np.count_nonzero(random_mask(1000, 25, rng)) == 25
    assert np.count_nonzero(random_mask(1000, 0.0, rng)) == 0
    assert np.count_nonzero(random_mask(1000, 1.0, rng)) == 1000
    assert random_mask(4, [0, 2]).tolist() == [True, False, True, False]
    assert random_mask(3, np.array([False, True, False])).tolist() == [False, True, False]

    with pytest.raises(ValueError):
        random_mask(10, 1.5)
    with pytest.raises(ValueError):
        random_mask(10, 11)
    with pytest.raises(DimensionMismatch):
        random_mask(3, np.array([True, False]))


def test_perturbate_binary_flips():
    """Test bit variants flip exactly the selected elements"""
    hv = BinaryHV.random(1000, 15)
    perturbed = perturbate(hv, 0.1, np.random.default_rng(16))
    assert np.count_nonzero(perturbed.data != hv.data) == 100
    # Input untouched
    assert hv == BinaryHV.random(1000, 15)

    bipolar = BipolarHV([1, 1, -1, -1])
    assert perturbate(bipolar, [0, 3]).tolist() == [-1, 1, -1, 1]


def test_perturbate_resamples_other_variants():
    """Test other variants redraw only the selected elements"""
    hv = RealHV.random(100, 17)
    mask = np.zeros(100, dtype=bool)
    mask[:10] = True
    perturbed = perturbate(hv, mask, np.random.default_rng(18))

    assert np.array_equal(perturbed.data[~mask], hv.data[~mask])
    assert np.all(perturbed.data[mask] != hv.data[mask])

    graded = perturbate(GradedHV.random(100, 19), 0.5, 20)
    assert graded.values.min() >= 0.0 and graded.values.max() <= 1.0


def test_perturbate_inplace():
    """Test the in-place form mutates and returns its argument"""
    hv = TernaryHV.random(100, 21)
    original = hv.copy()
    result = perturbate_inplace(hv, 100, np.random.default_rng(22))
    assert result is hv
    assert isinstance(hv, TernaryHV)
    assert set(hv.tolist()) <= {-1, 1}
    assert hv != original


def test_perturbate_similarity_decreases():
    """Test similarity to the original falls as more elements change"""
    hv = BipolarHV.random(10_000, 23)
    rng = np.random.default_rng(24)
    similarities = [cosine_similarity(hv, perturbate(hv, p, rng)) for p in (0.1, 0.2, 0.4)]
    assert similarities == pytest.approx([0.8, 0.6, 0.2])
