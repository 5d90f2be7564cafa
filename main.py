import argparse
import logging
import os
import sys

from bitops import BitWriter, BitReader
from huffman import HuffError
from processor import DEBUG_HIGH, DEBUG_LOW, HuffProcessor


def get_parser():
    """Create and configure the CLI argument parser.

    :returns: Configured argument parser.
    :rtype: argparse.ArgumentParser
    """
    parser = argparse.ArgumentParser(
        description="Huffman compressor for single files"
    )
    subparsers = parser.add_subparsers(
        title="subcommands", dest="cmd", required=True
    )

    for name, alias, help_text in (
        ("compress", "c", "Compress a file"),
        ("decompress", "d", "Decompress a file"),
    ):
        sub = subparsers.add_parser(name, aliases=[alias], help=help_text)
        sub.add_argument("source", help="Input file path")
        sub.add_argument(
            "-o", "--output", required=True, help="Output file path"
        )
        sub.add_argument(
            "-P",
            "--no-progress",
            action="store_true",
            help="Hide progress",
        )
        sub.add_argument(
            "-v",
            "--verbose",
            action="count",
            default=0,
            help="Log bits read/written (repeat to log every code)",
        )

    return parser


def _debug_level(verbose: int) -> int:
    """Map the number of ``-v`` flags to a processor debug level.

    :param verbose: How many times ``-v`` was given.
    :type verbose: int
    :returns: ``0``, ``DEBUG_LOW`` or ``DEBUG_HIGH``.
    :rtype: int
    """
    if verbose <= 0:
        return 0
    if verbose == 1:
        return DEBUG_LOW
    return DEBUG_HIGH


def _print_progress(line: str) -> None:
    """Render and flush a single progress line in-place (carriage return).

    :param line: The textual progress line to display.
    :type line: str
    :returns: None
    :rtype: None
    """
    sys.stdout.write("\r" + line)
    sys.stdout.flush()


def _fmt_pct(done: int, total: int) -> str:
    """Format a completion percentage string like ``12.34%``.

    :param done: Units completed.
    :type done: int
    :param total: Total units to complete.
    :type total: int
    :returns: Percentage.
    :rtype: str
    """
    if total <= 0:
        return "0%"
    pct = 100.0 * (done / float(total))
    return f"{pct:6.2f}%"


def _fmt_bytes(n: int) -> str:
    """Format a byte count into a human-readable string.

    :param n: Number of bytes.
    :type n: int
    :returns: Human-readable string.
    :rtype: str
    """
    for unit in ['', 'Ki', 'Mi', 'Gi', 'Ti']:
        if abs(n) < 1024:
            return f"{n:.2f} {unit}B"
        n /= 1024
    return f"{n:.2f} PiB"


class Progress:
    """Callable progress reporter for one compress/decompress run.

    Redraws the line only when the whole-percent bucket changes.

    :ivar label: Action label (e.g., "Compressing" or "Decompressing").
    :type label: str
    :ivar path: File name displayed next to the percentage.
    :type path: str
    """

    def __init__(self, label: str, path: str) -> None:
        self.label = label
        self.path = path
        self._last_reported = -1

    def __call__(self, done: int, total: int) -> None:
        """Update the progress display.

        :param done: Units processed so far.
        :type done: int
        :param total: Total units.
        :type total: int
        :returns: None
        :rtype: None
        """
        if total <= 0:
            return
        percent_bucket = int((done * 100) / total)
        if percent_bucket == self._last_reported:
            return
        self._last_reported = percent_bucket
        _print_progress(f"{self.label} {self.path}  {_fmt_pct(done, total)}")


def run(cmd: str, source: str, output: str, hide_progress: bool,
        debug: int = 0) -> int:
    """Compress or decompress ``source`` into ``output``.

    :param cmd: ``"compress"``/``"c"`` or ``"decompress"``/``"d"``.
    :type cmd: str
    :param source: Input file path.
    :type source: str
    :param output: Output file path.
    :type output: str
    :param hide_progress: Whether to suppress the progress line.
    :type hide_progress: bool
    :param debug: Processor debug level.
    :type debug: int
    :returns: Process exit status.
    :rtype: int
    """
    compressing = cmd in ("compress", "c")
    try:
        with open(source, "rb") as f:
            data = f.read()
    except FileNotFoundError:
        print(f"[!] Input file not found: {source}")
        return 1

    on_prog = None
    if not hide_progress:
        label = "Compressing" if compressing else "Decompressing"
        on_prog = Progress(label, os.path.basename(source))

    processor = HuffProcessor(debug)
    with open(output, "wb") as out:
        out_bits = BitWriter(sink=out)
        try:
            if compressing:
                processor.compress(BitReader(data), out_bits, on_prog)
            else:
                processor.decompress(BitReader(data), out_bits, on_prog)
        except HuffError as e:
            if not hide_progress:
                sys.stdout.write("\n")
            print(f"[!] Cannot decompress {source}: {e}")
            return 1

    if not hide_progress:
        sys.stdout.write("\n")
        sys.stdout.flush()
    if compressing:
        written = len(out_bits.buffer)
        print("Size before compression: ", _fmt_bytes(len(data)))
        print("Size after compression: ", _fmt_bytes(written))
        print(f"Compression ratio: {len(data) / written:.2f}")
    return 0


def main():
    """Entry point for the CLI tool.

    :returns: None
    :rtype: None
    """
    parser = get_parser()
    args = parser.parse_args()

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG, format="%(name)s: %(message)s"
        )
    sys.exit(
        run(
            args.cmd,
            args.source,
            args.output,
            getattr(args, "no_progress", False),
            _debug_level(args.verbose),
        )
    )


if __name__ == "__main__":
    main()
