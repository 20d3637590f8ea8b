"""
basis.py

Conversions between a basis-state index and the values of the individual
qubits it encodes. Bit k of an index (counting from the least significant
bit) is the value of qubit k.
"""

import numpy as np


def _validate_index(index: int, num_qubits: int):
    if num_qubits < 1:
        raise ValueError(f"Register must have at least one qubit, got {num_qubits}")
    if not (0 <= index < 2**num_qubits):
        raise ValueError(f"Basis index {index} out of range for {num_qubits} qubits")


def bit_of(index: int, qubit: int) -> bool:
    """
    Value of `qubit` within basis state `index`.
    """
    if qubit < 0:
        raise IndexError(f"Qubit index {qubit} out of range")
    return bool((index >> qubit) & 1)


def decompose(index: int, num_qubits: int) -> list:
    """
    Split a basis index into one boolean per qubit.

    The list is qubit-ordered: element k is qubit k, so
    decompose(i, n)[q] == bit_of(i, q).
    """
    _validate_index(index, num_qubits)
    bits = []
    for _ in range(num_qubits):
        bits.append(bool(index % 2))
        index //= 2
    return bits


def compose(bits) -> int:
    """
    Inverse of decompose().
    """
    index = 0
    for k, b in enumerate(bits):
        if b:
            index |= 1 << k
    return index


def represent(index: int, num_qubits: int) -> str:
    """
    Fixed-width bit string, most significant qubit first, e.g. "0010" for
    index 2 of a 4-qubit register.
    """
    return "".join("1" if b else "0" for b in reversed(decompose(index, num_qubits)))


def qubit_mask(num_qubits: int, qubit: int) -> np.ndarray:
    """
    Boolean mask over all 2**num_qubits basis indices, True where `qubit` is 1.
    """
    if not (0 <= qubit < num_qubits):
        raise IndexError(f"Qubit index {qubit} out of range")
    indices = np.arange(2**num_qubits)
    return ((indices >> qubit) & 1).astype(bool)
