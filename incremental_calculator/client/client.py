"""TCP client sending calculator sessions to the server and reading back their results."""
from pathlib import Path
import socket
import tarfile
import tempfile
import time
from typing import Callable, Dict, List, Tuple
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, IPvAnyAddress

from incremental_calculator.common.logger import logger
from incremental_calculator.common.models import SessionReply
from incremental_calculator.core.commands import CommandParser


def _read_zip(archive_path: Path) -> Tuple[str, bytes]:
    with zipfile.ZipFile(archive_path, "r") as zf:
        names = [name for name in zf.namelist() if name.endswith(".txt")]
        if not names:
            raise ValueError("📄❌ No .txt file found in zip archive")
        return names[0], zf.read(names[0])


def _read_tar_xz(archive_path: Path) -> Tuple[str, bytes]:
    with tarfile.open(archive_path, "r:xz") as tf:
        members = [m for m in tf.getmembers() if m.isfile() and m.name.endswith(".txt")]
        if not members:
            raise ValueError("📄❌ No .txt file found in tar.xz archive")
        return members[0].name, tf.extractfile(members[0]).read()


def _read_7z(archive_path: Path) -> Tuple[str, bytes]:
    with py7zr.SevenZipFile(archive_path, mode="r") as archive:
        names = [name for name in archive.getnames() if name.endswith(".txt")]
        if not names:
            raise ValueError("📄❌ No .txt file found in 7z archive")
        # py7zr only extracts to disk
        with tempfile.TemporaryDirectory() as tmpdir:
            archive.extract(path=tmpdir, targets=[names[0]])
            return names[0], (Path(tmpdir) / names[0]).read_bytes()


# Archive readers keyed by the file suffixes they handle
ARCHIVE_READERS: Dict[Tuple[str, ...], Callable[[Path], Tuple[str, bytes]]] = {
    (".zip",): _read_zip,
    (".tar", ".xz"): _read_tar_xz,
    (".7z",): _read_7z,
}


class CalculatorClient(BaseModel):
    """
    TCP client for the calculator server.

    The client:
    - loads session lines from a text file or the first .txt member of an archive
    - checks every line against the command protocol, so malformed sessions are
      rejected locally and never reach a worker
    - sends the well-formed sessions and reads the server's results back
      as SessionReply records
    - writes every reply, rejected sessions included, to an output file
    """

    # Make the Pydantic instance immutable (read-only), to prevent errors
    # that could be caused by changes to the network configuration during execution.
    model_config = ConfigDict(frozen=True)

    host: IPvAnyAddress = Field(default="127.0.0.1", description="Server host address")
    port: int = Field(default=9000, ge=1, le=65535, description="Server TCP port")
    connect_attempts: int = Field(default=25, ge=1, description="Connection attempts before giving up")
    retry_delay: float = Field(default=0.2, ge=0, description="Seconds between connection attempts")

    def read_sessions(self, input_file: FilePath) -> List[str]:
        """
        Load the non-empty session lines of a text file or archive.

        :param FilePath input_file: Path to a .txt file or a .zip, .tar.xz or .7z archive

        :return: Stripped, non-empty lines
        :rtype: List[str]
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        if input_file.suffix == ".txt":
            content = input_file.read_text()
        else:
            content = self._read_archive(input_file)
        return [line.strip() for line in content.splitlines() if line.strip()]

    def check_sessions(self, sessions: List[str]) -> Tuple[List[str], List[SessionReply]]:
        """
        Split sessions into those the server can run and those that are malformed.

        :param List[str] sessions: Session lines

        :return: Tuple of (well-formed sessions, replies for the rejected ones)
        :rtype: Tuple[List[str], List[SessionReply]]
        """
        accepted: List[str] = []
        rejected: List[SessionReply] = []
        for line_number, session in enumerate(sessions, start=1):
            try:
                CommandParser.parse(session)
            except ValueError as exc:
                logger.warning(f"📄⚠️ Line {line_number} rejected: {exc}")
                rejected.append(SessionReply(session=session, error=str(exc)))
            else:
                accepted.append(session)
        return accepted, rejected

    def _connect(self) -> socket.socket:
        """
        Open a connection, retrying while the server is not listening yet.

        :return: Connected socket
        :rtype: socket.socket
        :raises OSError: If the last attempt fails
        """
        for attempt in range(1, self.connect_attempts + 1):
            s = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
            try:
                s.connect((str(self.host), self.port))
                return s
            except OSError as exc:
                s.close()
                if attempt == self.connect_attempts:
                    raise
                logger.debug(f"🔌 Attempt {attempt} to reach {self.host}:{self.port} failed: {exc}")
                time.sleep(self.retry_delay)

    def exchange(self, sessions: List[str]) -> List[SessionReply]:
        """
        Send sessions to the server and parse its reply.

        :param List[str] sessions: Well-formed session lines

        :return: One reply per session, in the order the server finished them
        :rtype: List[SessionReply]
        :raises ValueError: If the server sends a line that is not a session reply
        """
        with self._connect() as s:
            s.sendall(("\n".join(sessions) + "\n").encode())
            # Signal that no more data will be sent
            s.shutdown(socket.SHUT_WR)

            # Data may arrive in several packets; the server closes when done
            chunks: List[bytes] = []
            while True:
                chunk = s.recv(4096)
                if not chunk:
                    break
                chunks.append(chunk)

        lines = b"".join(chunks).decode().splitlines()
        return [SessionReply.from_line(line) for line in lines if line.strip()]

    def send_file(self, input_file: FilePath, output_file: Path) -> List[SessionReply]:
        """
        Run every session of an input file through the server and write the results.

        Rejected sessions are written after the server's results, as ``-> ERROR`` lines.

        :param FilePath input_file: Path to the input file or archive
        :param Path output_file: Path where results will be written

        :return: Replies from the server followed by the locally rejected sessions
        :rtype: List[SessionReply]
        :raises ValueError: If the input cannot be read or the server reply is malformed
        """
        accepted, rejected = self.check_sessions(self.read_sessions(input_file))

        replies: List[SessionReply] = []
        if accepted:
            logger.info(f"📤 Sending {len(accepted)} session(s) to {self.host}:{self.port}")
            replies = self.exchange(accepted)
        replies.extend(rejected)

        with output_file.open("w", encoding="utf-8") as f_out:
            for reply in replies:
                f_out.write(reply.to_line() + "\n")

        logger.info(f"📥 {len(replies)} result(s) written to {output_file}")
        return replies

    def _read_archive(self, archive_path: Path) -> str:
        """
        Return the text of the first .txt member of a supported archive.

        :param Path archive_path: Path to a .zip, .tar.xz or .7z archive

        :return: Decoded content of the member
        :rtype: str
        :raises ValueError: If no .txt member is found or the format is unsupported
        """
        for suffixes, reader in ARCHIVE_READERS.items():
            if tuple(archive_path.suffixes[-len(suffixes):]) == suffixes:
                name, data = reader(archive_path)
                logger.debug(f"📦 Read {name} from {archive_path}")
                return data.decode()
        raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")
