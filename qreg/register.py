# register.py

import logging
import numbers

import numpy as np

from qreg.basis import decompose, bit_of, qubit_mask
from qreg.sampling import weighted_choice, NORM_TOLERANCE
from qreg.display import describe

logger = logging.getLogger(__name__)


class InvalidArgument(ValueError):
    """Register constructed with an unusable qubit count."""


class InternalInconsistency(RuntimeError):
    """The norm invariant no longer holds after a collapse."""


class EntangledRegister:
    """
    Emulates an entangled register of N qubits as a dense vector of 2**N
    complex amplitudes.

    Storage order: |0..00⟩, |0..01⟩, |0..10⟩, ..., |1..11⟩, where bit k of
    the index is qubit k. The random source is any object with a
    ``random()`` method returning floats in [0, 1); each register owns its
    own so that measurements are reproducible under a fixed seed.
    """

    LARGE_REGISTER_THRESHOLD = 5

    def __init__(self, num_qubits: int, rng=None):
        if (isinstance(num_qubits, bool) or not isinstance(num_qubits, numbers.Integral)
                or num_qubits < 1):
            raise InvalidArgument(f"Register needs at least one qubit, got {num_qubits!r}")
        if num_qubits > self.LARGE_REGISTER_THRESHOLD:
            logger.warning(
                "Emulating %d qubits (%d states) may not finish in a feasible amount of time",
                num_qubits, 2**num_qubits,
            )

        self.num_qubits = int(num_qubits)
        self.num_states = 2**self.num_qubits
        self.rng = rng if rng is not None else np.random.default_rng()

        self.state = np.zeros(self.num_states, dtype=complex)
        self.set_pure(0)

    def _validate_qubit(self, qubit):
        if isinstance(qubit, bool) or not isinstance(qubit, numbers.Integral):
            raise TypeError(f"Invalid qubit index: {qubit!r}")
        if not (0 <= qubit < self.num_qubits):
            raise IndexError(f"Qubit index {qubit} out of range")

    # ------------------------------------------------------------------
    # State helpers
    # ------------------------------------------------------------------

    def set_pure(self, index: int):
        """Collapse into the single basis state ``index``."""
        if not (0 <= index < self.num_states):
            raise ValueError(f"Basis index {index} out of range")
        self.state[:] = 0
        self.state[index] = 1.0

    def set_state(self, vector):
        """
        Replace the amplitudes with ``vector``, which must have 2**N entries
        and unit norm.
        """
        vec = np.asarray(vector, dtype=complex)
        if vec.shape != (self.num_states,):
            raise ValueError(f"Expected {self.num_states} amplitudes, got shape {vec.shape}")
        total = (np.abs(vec)**2).sum()
        if not abs(total - 1.0) <= NORM_TOLERANCE:
            raise ValueError(f"State is not normalised (total probability {total})")
        self.state = vec.copy()

    def full_state(self):
        return self.state.copy()

    def probabilities(self) -> np.ndarray:
        """
        Classical (Born rule) probabilities of every basis state. A real
        device cannot report these without destroying the state.
        """
        return np.abs(self.state)**2

    def check_norm(self) -> bool:
        """Whether the total occupation is still unity."""
        return bool(abs(self.probabilities().sum() - 1.0) <= NORM_TOLERANCE)

    def _assert_norm(self):
        if not self.check_norm():
            raise InternalInconsistency(
                f"Total probability drifted to {self.probabilities().sum()}"
            )

    # ------------------------------------------------------------------
    # Measurement
    # ------------------------------------------------------------------

    def observe_index(self) -> int:
        """
        Observe and collapse the whole register, returning the basis index
        of the pure state it ends up in.
        """
        pick = weighted_choice(self.probabilities(), self.rng)
        self.set_pure(pick)
        logger.debug("Register collapsed to |%d⟩", pick)
        return pick

    def observe(self) -> list:
        """
        Observe and collapse the whole register. Returns the value of every
        qubit, indexed by qubit.
        """
        return decompose(self.observe_index(), self.num_qubits)

    def observe_subsystem(self, qubit: int) -> bool:
        """
        Measure a single qubit, leaving the others in superposition.

        Amplitudes inconsistent with the observed value are zeroed and the
        survivors are rescaled by 1/sqrt(retained probability).
        """
        self._validate_qubit(qubit)
        pick = weighted_choice(self.probabilities(), self.rng)
        observed = bit_of(pick, qubit)

        keep = qubit_mask(self.num_qubits, qubit) == observed
        self.state[~keep] = 0
        retained = (np.abs(self.state[keep])**2).sum()
        self.state[keep] /= np.sqrt(retained)

        self._assert_norm()
        logger.debug("Qubit %d observed as %d", qubit, int(observed))
        return observed

    def __str__(self):
        return describe(self)


def new_register(num_qubits: int, rng=None) -> EntangledRegister:
    return EntangledRegister(num_qubits, rng)
