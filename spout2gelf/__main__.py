import sys

from spout2gelf.commands.forward import ForwardCommand, run_forward


def main():
    sys.exit(run_forward(ForwardCommand()))


if __name__ == "__main__":
    main()
