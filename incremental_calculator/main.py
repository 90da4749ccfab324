"""
Command-line runner for files of calculator sessions.

Each line of the input is one session, commands separated by ';':

    value 2; binop +; value 3; binop *; value 4; compute

The runner starts a CalculatorServer in a child process, sends the file through
a CalculatorClient, writes one result line per session next to the input, and
exits with status 1 when any session was rejected as malformed.
"""
import argparse
from multiprocessing import Process
from pathlib import Path
import sys
from typing import List, Optional

from pydantic import BaseModel, Field, FilePath, IPvAnyAddress, ValidationError

from incremental_calculator.client.client import CalculatorClient
from incremental_calculator.common.logger import logger, setup_logging
from incremental_calculator.common.models import SessionReply
from incremental_calculator.server.server import CalculatorServer


class CliArgs(BaseModel):
    """Validated command-line arguments."""

    file_path: FilePath = Field(..., description="Sessions file (.txt, .zip, .tar.xz or .7z)")
    host: IPvAnyAddress = Field(default="127.0.0.1", description="Address the server binds and the client reaches")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    log_level: Optional[str] = Field(default=None, description="Overrides CALCULATOR_LOG_LEVEL")


def serve(output_file: Path, host: str, port: int, log_level: Optional[str] = None) -> None:
    """Child-process target: configure logging, then serve a single client."""
    setup_logging(log_level)
    CalculatorServer(host=host, port=port, output_file=output_file).start()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="incremental-calculator",
        description="Run a file of calculator sessions through the calculator server",
    )
    parser.add_argument("file_path", help="Sessions file (.txt, .zip, .tar.xz or .7z)")
    parser.add_argument("--host", default="127.0.0.1", help="Server address")
    parser.add_argument("--port", type=int, default=9000, help="Server TCP port")
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING or ERROR")
    return parser


def parse_args(argv: Optional[List[str]] = None) -> CliArgs:
    """
    Parse and validate command-line arguments.

    Validation failures are reported through argparse, which exits with status 2.

    :param Optional[List[str]] argv: Arguments to parse, defaults to sys.argv[1:]

    :return: Validated CLI arguments
    :rtype: CliArgs
    """
    parser = build_parser()
    namespace = parser.parse_args(argv)
    try:
        return CliArgs(**vars(namespace))
    except ValidationError as exc:
        parser.error(str(exc))


def build_output_path(input_path: Path) -> Path:
    """
    Name the results file after the input, in the same folder.

    Every suffix is folded into the name so that results of ``x.txt`` and ``x.7z``
    do not collide: ``resources/sessions.tar.xz`` gives ``resources/sessions_tar_xz_results.txt``.

    :param Path input_path: Path to the input file

    :return: Path to the results file
    :rtype: Path
    """
    stem = input_path.name.split(".", 1)[0]
    suffix_safe = "_".join(suffix.lstrip(".") for suffix in input_path.suffixes)
    if suffix_safe:
        suffix_safe = f"_{suffix_safe}"
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


def summarize(replies: List[SessionReply]) -> int:
    """
    Log a summary of the replies and return the process exit status.

    :param List[SessionReply] replies: Replies for every session of the input

    :return: 0 if every session ran, 1 if any was rejected
    :rtype: int
    """
    rejected = [reply for reply in replies if reply.rejected]
    faulted = [reply for reply in replies if reply.faults]
    logger.info(
        f"🧮 {len(replies)} session(s): {len(replies) - len(rejected)} ran, "
        f"{len(faulted)} with calculator faults, {len(rejected)} rejected"
    )
    return 1 if rejected else 0


def main(argv: Optional[List[str]] = None) -> int:
    """
    Run the sessions file given on the command line.

    :param Optional[List[str]] argv: Arguments to parse, defaults to sys.argv[1:]

    :return: Process exit status
    :rtype: int
    """
    cli_args = parse_args(argv)
    setup_logging(cli_args.log_level)
    output_path = build_output_path(cli_args.file_path)

    server_process = Process(
        target=serve,
        args=(output_path, str(cli_args.host), cli_args.port, cli_args.log_level),
        daemon=True,
    )
    server_process.start()

    try:
        # The client retries until the server is listening
        client = CalculatorClient(host=cli_args.host, port=cli_args.port)
        replies = client.send_file(cli_args.file_path, output_path)
    finally:
        # The server only exits by itself once it has served a client
        server_process.terminate()
        server_process.join()

    return summarize(replies)


if __name__ == "__main__":
    sys.exit(main())
