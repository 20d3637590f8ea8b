"""
main.py

Entry point for the entangled register emulator CLI.
"""

from cli import interactive_cli


def main():
    """
    Launch the emulator CLI.

    Ensures:
         The interactive CLI is started with a 4-qubit register.
    """
    print("=== Starting Entangled Register Emulator CLI ===")
    interactive_cli()


if __name__ == '__main__':
    main()
