import unittest
from unittest import mock
import numpy as np
from qreg.basis import decompose, compose, bit_of, represent, qubit_mask
from qreg.sampling import weighted_choice, InvalidDistribution
from qreg.register import (
    EntangledRegister,
    InvalidArgument,
    InternalInconsistency,
    new_register,
)
from qreg.display import magnitude_bar, render, describe
from cli import RegisterSession, run_command, color_text, COLORS


class FixedSource:
    """Random source that always returns the same draw."""

    def __init__(self, value):
        self.value = value
        self.calls = 0

    def random(self):
        self.calls += 1
        return self.value


def random_state(num_qubits, seed):
    rng = np.random.default_rng(seed)
    dim = 2**num_qubits
    vec = rng.normal(size=dim) + 1j * rng.normal(size=dim)
    return vec / np.linalg.norm(vec)


# -------------------------------------------------------------------
# Basis index codec
# -------------------------------------------------------------------
class TestBasis(unittest.TestCase):
    def test_decompose_is_qubit_ordered(self):
        self.assertEqual(decompose(2, 4), [False, True, False, False])
        self.assertEqual(decompose(0, 1), [False])
        self.assertEqual(decompose(7, 3), [True, True, True])

    def test_represent_most_significant_first(self):
        self.assertEqual(represent(2, 4), "0010")
        self.assertEqual(represent(1, 3), "001")
        self.assertEqual(represent(6, 3), "110")

    def test_bit_of_agrees_with_decompose(self):
        for i in range(16):
            bits = decompose(i, 4)
            for q in range(4):
                self.assertEqual(bit_of(i, q), bits[q])
            self.assertEqual(compose(bits), i)

    def test_qubit_mask(self):
        np.testing.assert_array_equal(
            qubit_mask(2, 1), np.array([False, False, True, True])
        )
        with self.assertRaises(IndexError):
            qubit_mask(2, 2)

    def test_out_of_range_index(self):
        with self.assertRaises(ValueError):
            decompose(8, 3)
        with self.assertRaises(ValueError):
            represent(-1, 3)


# -------------------------------------------------------------------
# Weighted sampler
# -------------------------------------------------------------------
class TestWeightedChoice(unittest.TestCase):
    def test_zero_draw_returns_first_index(self):
        self.assertEqual(weighted_choice([0.25, 0.25, 0.5], FixedSource(0.0)), 0)

    def test_draw_near_one_returns_last_nonzero(self):
        draw = FixedSource(np.nextafter(1.0, 0.0))
        self.assertEqual(weighted_choice([0.5, 0.5, 0.0, 0.0], draw), 1)
        self.assertEqual(weighted_choice([0.2, 0.3, 0.5], draw), 2)

    def test_boundary_is_inclusive(self):
        self.assertEqual(weighted_choice([0.5, 0.5], FixedSource(0.5)), 0)

    def test_rounding_shortfall_falls_back(self):
        weights = [0.5, 0.5 - 1e-9, 0.0]
        self.assertEqual(weighted_choice(weights, FixedSource(0.9999999999)), 1)

    def test_consumes_one_draw(self):
        src = FixedSource(0.3)
        weighted_choice([0.1, 0.9], src)
        self.assertEqual(src.calls, 1)

    def test_rejects_bad_sum_before_drawing(self):
        src = FixedSource(0.3)
        with self.assertRaises(InvalidDistribution):
            weighted_choice([0.3, 0.3], src)
        self.assertEqual(src.calls, 0)

    def test_rejects_negative_weights(self):
        with self.assertRaises(InvalidDistribution):
            weighted_choice([1.5, -0.5], FixedSource(0.1))

    def test_rejects_nan_weights(self):
        src = FixedSource(0.5)
        with self.assertRaises(InvalidDistribution):
            weighted_choice([float("nan"), 0.5], src)
        with self.assertRaises(InvalidDistribution):
            weighted_choice([np.nan, 1.0], src)
        self.assertEqual(src.calls, 0)

    def test_zero_draw_skips_zero_weights(self):
        self.assertEqual(weighted_choice([0, 1], FixedSource(0.0)), 1)
        self.assertEqual(weighted_choice([0, 0, 0.4, 0.6], FixedSource(0.0)), 2)

    def test_index_always_in_bounds(self):
        rng = np.random.default_rng(1234)
        for _ in range(200):
            n = int(rng.integers(1, 20))
            weights = rng.dirichlet(np.ones(n))
            k = weighted_choice(weights, rng)
            self.assertTrue(0 <= k < n)
            self.assertGreater(weights[k], 0)


# -------------------------------------------------------------------
# Entangled register
# -------------------------------------------------------------------
class TestRegister(unittest.TestCase):
    def test_initial_state(self):
        reg = new_register(3, np.random.default_rng(7))
        np.testing.assert_allclose(reg.probabilities(), [1, 0, 0, 0, 0, 0, 0, 0])
        self.assertEqual(reg.num_states, 8)
        self.assertTrue(reg.check_norm())

    def test_rejects_bad_qubit_counts(self):
        for bad in (0, -3, 2.5, True):
            with self.assertRaises(InvalidArgument):
                new_register(bad, FixedSource(0.1))
        self.assertTrue(issubclass(InvalidArgument, ValueError))

    def test_large_register_warns(self):
        with self.assertLogs("qreg.register", level="WARNING"):
            reg = EntangledRegister(6, FixedSource(0.1))
        self.assertTrue(reg.check_norm())

    def test_two_qubit_scenario(self):
        reg = EntangledRegister(2, FixedSource(0.5))
        np.testing.assert_allclose(reg.probabilities(), [1, 0, 0, 0])
        self.assertEqual(reg.observe(), [False, False])
        np.testing.assert_allclose(reg.full_state(), [1, 0, 0, 0])

    def test_observe_collapses_to_returned_state(self):
        reg = EntangledRegister(3, np.random.default_rng(5))
        reg.set_state(np.full(8, 1 / np.sqrt(8)))
        bits = reg.observe()
        k = compose(bits)
        expected = np.zeros(8, dtype=complex)
        expected[k] = 1
        np.testing.assert_array_equal(reg.full_state(), expected)
        self.assertEqual(np.count_nonzero(reg.state), 1)

    def test_observe_index_follows_draw(self):
        reg = EntangledRegister(2, FixedSource(0.6))
        reg.set_state([0.5, 0.5, 0.5, 0.5])
        self.assertEqual(reg.observe_index(), 2)
        np.testing.assert_allclose(reg.probabilities(), [0, 0, 1, 0])

    def test_bell_state_partial_measurement(self):
        bell = np.array([1, 0, 0, 1], dtype=complex) / np.sqrt(2)

        reg = EntangledRegister(2, FixedSource(0.25))
        reg.set_state(bell)
        self.assertFalse(reg.observe_subsystem(0))
        np.testing.assert_allclose(reg.full_state(), [1, 0, 0, 0], atol=1e-12)

        reg = EntangledRegister(2, FixedSource(0.75))
        reg.set_state(bell)
        self.assertTrue(reg.observe_subsystem(1))
        np.testing.assert_allclose(reg.full_state(), [0, 0, 0, 1], atol=1e-12)

    def test_partial_measurement_keeps_superposition(self):
        reg = EntangledRegister(2, FixedSource(0.1))
        reg.set_state([0.5, 0.5, 0.5, 0.5])
        self.assertFalse(reg.observe_subsystem(0))
        s = 1 / np.sqrt(2)
        np.testing.assert_allclose(reg.full_state(), [s, 0, s, 0], atol=1e-12)
        self.assertTrue(reg.check_norm())

    def test_partial_measurement_renormalises_complex_amplitudes(self):
        reg = EntangledRegister(1, FixedSource(0.9))
        reg.set_state([0.6, 0.8j])
        self.assertTrue(reg.observe_subsystem(0))
        np.testing.assert_allclose(reg.full_state(), [0, 1j], atol=1e-12)

    def test_qubit_index_validation(self):
        reg = EntangledRegister(2, FixedSource(0.1))
        with self.assertRaises(IndexError):
            reg.observe_subsystem(2)
        with self.assertRaises(IndexError):
            reg.observe_subsystem(-1)
        with self.assertRaises(TypeError):
            reg.observe_subsystem("0")

    def test_set_state_validation(self):
        reg = EntangledRegister(2, FixedSource(0.1))
        with self.assertRaises(ValueError):
            reg.set_state([1, 0])
        with self.assertRaises(ValueError):
            reg.set_state([1, 1, 0, 0])
        with self.assertRaises(ValueError):
            reg.set_pure(4)

    def test_set_state_rejects_nan(self):
        reg = EntangledRegister(2, FixedSource(0.1))
        with self.assertRaises(ValueError):
            reg.set_state([np.nan, 0, 0, 0])
        with self.assertRaises(ValueError):
            reg.set_state([complex(np.nan, 1), 0, 0, 0])
        np.testing.assert_array_equal(reg.full_state(), [1, 0, 0, 0])

    def test_norm_violation_is_internal_inconsistency(self):
        reg = EntangledRegister(2, FixedSource(0.1))
        reg.state[1] = 1.0
        self.assertFalse(reg.check_norm())

    def test_partial_collapse_onto_empty_subspace_raises(self):
        # |00> has no weight where qubit 0 is 1, so renormalising leaves no norm
        reg = EntangledRegister(2, FixedSource(0.1))
        with mock.patch("qreg.register.weighted_choice", return_value=1):
            with np.errstate(divide="ignore", invalid="ignore"):
                with self.assertRaises(InternalInconsistency):
                    reg.observe_subsystem(0)

    def test_seeded_sources_are_reproducible(self):
        outcomes = []
        for _ in range(2):
            reg = EntangledRegister(3, np.random.default_rng(42))
            run = []
            for _ in range(5):
                reg.set_state(np.full(8, 1 / np.sqrt(8)))
                run.append(reg.observe_index())
            outcomes.append(run)
        self.assertEqual(outcomes[0], outcomes[1])


def _make_norm_test(num_qubits):
    def test(self):
        reg = EntangledRegister(num_qubits, np.random.default_rng(num_qubits))
        self.assertTrue(reg.check_norm())

        reg.set_state(random_state(num_qubits, seed=100 + num_qubits))
        self.assertTrue(reg.check_norm())

        indices = np.arange(reg.num_states)
        for q in range(num_qubits):
            bit = reg.observe_subsystem(q)
            self.assertTrue(reg.check_norm())
            other = ((indices >> q) & 1).astype(bool) != bit
            self.assertTrue((reg.state[other] == 0).all())

        bits = reg.observe()
        self.assertTrue(reg.check_norm())
        self.assertEqual(reg.state[compose(bits)], 1)
    return test

for n in range(1, 11):
    setattr(TestRegister, f"test_norm_preserved_{n}_qubits", _make_norm_test(n))


# -------------------------------------------------------------------
# Presentation
# -------------------------------------------------------------------
class TestDisplay(unittest.TestCase):
    def test_magnitude_bar(self):
        self.assertEqual(magnitude_bar(1.0), "********")
        self.assertEqual(magnitude_bar(0.0), "        ")
        self.assertEqual(magnitude_bar(0.3), " *******")
        self.assertEqual(magnitude_bar(0.01), "      **")

    def test_out_of_range_sentinels(self):
        self.assertEqual(magnitude_bar(-0.1), "NEGATIVE")
        self.assertEqual(magnitude_bar(1.5), "TOO BIG ")

    def test_render_fresh_register(self):
        reg = EntangledRegister(2, FixedSource(0.1))
        lines = render(reg).split("\n")
        self.assertEqual(len(lines), 4)
        self.assertEqual(lines[0], " |00> ********  1.000 + 0.000i")
        self.assertEqual(lines[1], " |01> " + " " * 8 + "  0.000 + 0.000i")
        self.assertEqual(lines[3][:6], " |11> ")

    def test_render_complex_amplitudes(self):
        reg = EntangledRegister(1, FixedSource(0.1))
        reg.set_state([0.6, 0.8j])
        lines = render(reg).split("\n")
        self.assertTrue(lines[0].endswith("0.600 + 0.000i"))
        self.assertTrue(lines[1].endswith("0.000 + 0.800i"))

    def test_describe(self):
        reg = EntangledRegister(3, FixedSource(0.1))
        text = describe(reg)
        self.assertTrue(text.startswith("3-qubit entangled quantum system:\n"))
        self.assertEqual(len(text.split("\n")), 9)
        self.assertEqual(str(reg), text)


# -------------------------------------------------------------------
# CLI commands
# -------------------------------------------------------------------
class TestCommands(unittest.TestCase):
    def test_session_flow(self):
        session = RegisterSession(2, seed=3)
        self.assertIn("2-qubit", run_command("NEW 2 --SEED 3", session))
        run_command("LOAD 0.7071067811865476 0 0 0.7071067811865476", session)
        msg = run_command("OBSERVEQ 0", session)
        self.assertTrue(msg.startswith("Qubit 0 observed as"))
        self.assertEqual(run_command("NORM", session), "Norm OK")
        self.assertEqual(len(session.history), 4)

    def test_observe_command(self):
        session = RegisterSession(3, seed=0)
        self.assertEqual(run_command("observe", session), "Collapsed to |000>")

    def test_color_text_falls_back_to_reset(self):
        self.assertEqual(color_text("hi", "red"), COLORS["red"] + "hi" + COLORS["reset"])
        self.assertEqual(color_text("hi", "mauve"), COLORS["reset"] + "hi" + COLORS["reset"])

    def test_bad_commands(self):
        session = RegisterSession(1)
        with self.assertRaises(ValueError):
            run_command("FROB", session)
        with self.assertRaises(InvalidArgument):
            run_command("NEW 0", session)
        with self.assertRaises(IndexError):
            run_command("OBSERVEQ 5", session)


if __name__ == "__main__":
    unittest.main()
