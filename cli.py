# cli.py

"""
Interactive CLI for the entangled register emulator.
"""

import logging

import numpy as np

from qreg.display import describe
from qreg.register import EntangledRegister

# ANSI colors
COLORS = {
    "reset": "\033[0m",
    "red":   "\033[31m",
    "green": "\033[32m",
    "yellow":"\033[33m",
    "blue":  "\033[34m",
    "magenta":"\033[35m",
    "cyan":  "\033[36m"
}

DEFAULT_QUBITS = 4


def color_text(text, color):
    return f"{COLORS.get(color, COLORS['reset'])}{text}{COLORS['reset']}"


def print_help():
    print(f"""
{color_text('=== Entangled Register CLI ===','yellow')}

{color_text('Register','cyan')}
  NEW <n> [--SEED <s>]     # fresh n-qubit register in |0...0>
  LOAD <a0> <a1> ...       # set amplitudes, e.g. 0.7071 0.7071j
  SHOW                     # amplitude table
  PROBS                    # Born-rule probabilities
  NORM                     # check total probability is 1

{color_text('Measurement','cyan')}
  OBSERVE                  # collapse the whole register
  OBSERVEQ <q>             # measure qubit q only

{color_text('Other','cyan')}
  HELP, EXIT
""")


class RegisterSession:
    def __init__(self, num_qubits=DEFAULT_QUBITS, seed=None):
        self.register = None
        self.history = []
        self.new_register(num_qubits, seed)

    def new_register(self, num_qubits, seed=None):
        rng = np.random.default_rng(seed)
        self.register = EntangledRegister(num_qubits, rng)
        self.history.append(f"NEW {num_qubits} seed={seed}")
        return f"{num_qubits}-qubit register initialised to |{'0' * num_qubits}>"

    def load(self, values):
        amps = [complex(v) for v in values]
        self.register.set_state(amps)
        self.history.append(f"LOAD {' '.join(values)}")
        return f"Loaded {len(amps)} amplitudes"

    def observe(self):
        bits = self.register.observe()
        self.history.append(f"OBSERVE -> {bits}")
        # qubit 0 is the rightmost character, as in SHOW
        return "Collapsed to |" + "".join("1" if b else "0" for b in reversed(bits)) + ">"

    def observe_qubit(self, qubit):
        value = self.register.observe_subsystem(qubit)
        self.history.append(f"OBSERVEQ {qubit} -> {int(value)}")
        return f"Qubit {qubit} observed as {int(value)}"

    def probabilities(self):
        return "\n".join(f"  [{k}] {p:.6f}"
                         for k, p in enumerate(self.register.probabilities()))

    def norm(self):
        return "Norm OK" if self.register.check_norm() else "Norm VIOLATED"


def run_command(inp, session: RegisterSession):
    """
    Execute one CLI line against ``session``.

    Returns the text to print. Raises on malformed input or failed
    operations; the caller decides how to report it.
    """
    parts = inp.strip().split()
    cmd = parts[0].upper()
    args = parts[1:]

    if cmd == "NEW":
        if not args:
            raise ValueError("NEW needs a qubit count")
        U = [a.upper() for a in args]
        seed = None
        if "--SEED" in U:
            idx = U.index("--SEED")
            if idx + 1 >= len(args):
                raise ValueError("--SEED needs a value")
            seed = int(args[idx + 1])
        return session.new_register(int(args[0]), seed)
    if cmd == "LOAD":
        return session.load(args)
    if cmd == "SHOW":
        return describe(session.register)
    if cmd == "PROBS":
        return session.probabilities()
    if cmd == "NORM":
        return session.norm()
    if cmd == "OBSERVE":
        return session.observe()
    if cmd == "OBSERVEQ":
        if len(args) != 1:
            raise ValueError("OBSERVEQ needs exactly one qubit index")
        return session.observe_qubit(int(args[0]))
    raise ValueError(f"Unknown command '{parts[0]}'")


# ——— interactive loop —————————————————————————————————————————————
def interactive_cli():
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    session = RegisterSession()

    print(color_text("Welcome to the Entangled Register CLI!", "green"))
    print_help()
    print(describe(session.register))

    while True:
        try:
            inp = input(color_text(">> ", "yellow")).strip()
        except (EOFError, KeyboardInterrupt):
            print()
            break
        if not inp:
            continue

        cmd = inp.split()[0].upper()
        if cmd == "EXIT":
            break
        if cmd == "HELP":
            print_help()
            continue

        try:
            print(color_text(run_command(inp, session), "green"))
        except Exception as e:
            print(color_text(f"Error: {e}", "red"))

if __name__ == "__main__":
    interactive_cli()
