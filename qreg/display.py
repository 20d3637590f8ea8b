"""
display.py

Text rendering of a register's amplitudes. One line per basis state, in
ascending index order:

     |0010> ****      0.707 + 0.000i

Only reads ``num_qubits``, ``num_states`` and ``state`` from the register.
"""

import numpy as np

from qreg.basis import represent

BAR_WIDTH = 8


def magnitude_bar(magnitude: float, steps: int = BAR_WIDTH) -> str:
    """
    Show a value in [0, 1] as ``*`` symbols on a log2 scale: symbol k is
    filled when the value exceeds 0.5**k.
    """
    if magnitude < 0:
        return "NEGATIVE"
    if magnitude > 1:
        return "TOO BIG "
    return "".join("*" if magnitude > 0.5**k else " " for k in range(1, steps + 1))


def format_amplitude_line(index: int, num_qubits: int, amp: complex) -> str:
    prob = float(np.abs(amp)**2)
    return f" |{represent(index, num_qubits)}> {magnitude_bar(prob)}  {amp.real:.3f} + {amp.imag:.3f}i"


def render(register) -> str:
    return "\n".join(
        format_amplitude_line(j, register.num_qubits, complex(register.state[j]))
        for j in range(register.num_states)
    )


def describe(register) -> str:
    return f"{register.num_qubits}-qubit entangled quantum system:\n{render(register)}"
