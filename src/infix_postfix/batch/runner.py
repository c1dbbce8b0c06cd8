"""Evaluate a file of expression lines using worker processes."""
import lzma
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection, wait
from pathlib import Path
import tarfile
import tempfile
from typing import IO, Any, Dict, List, Optional, Tuple
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, ValidationError

from infix_postfix.batch.worker import WorkerProcess, split_line
from infix_postfix.common.errors import ExpressionError
from infix_postfix.common.logger import logger
from infix_postfix.common.operations import OperationRequest


# Errors raised by the archive libraries on damaged or mislabelled input
ARCHIVE_ERRORS: Tuple[type, ...] = (
    zipfile.BadZipFile,
    tarfile.TarError,
    lzma.LZMAError,
    py7zr.Bad7zFile,
    EOFError,
)


def _first_txt(names: List[str], kind: str) -> str:
    txt_names = [name for name in names if name.endswith(".txt")]
    if not txt_names:
        raise ValueError(f"📄❌ No .txt file found in {kind} archive")
    return txt_names[0]


def _read_zip(archive_path: Path) -> str:
    with zipfile.ZipFile(archive_path) as zf:
        name = _first_txt([info.filename for info in zf.infolist() if not info.is_dir()], "zip")
        return zf.read(name).decode("utf-8")


def _read_tar_xz(archive_path: Path) -> str:
    with tarfile.open(archive_path, "r:xz") as tf:
        members = {m.name: m for m in tf.getmembers() if m.isfile()}
        name = _first_txt(list(members), "tar.xz")
        return tf.extractfile(members[name]).read().decode("utf-8")


def _read_7z(archive_path: Path) -> str:
    # py7zr only extracts to disk
    with py7zr.SevenZipFile(archive_path, mode="r") as archive, tempfile.TemporaryDirectory() as tmpdir:
        name = _first_txt(archive.getnames(), "7z")
        archive.extract(path=tmpdir, targets=[name])
        return (Path(tmpdir) / name).read_text(encoding="utf-8")


def read_archive_text(archive_path: Path) -> str:
    """
    Return the content of the first .txt file inside a .zip, .tar.xz or .7z archive.

    :param Path archive_path: Path to the archive file

    :return: Content of the .txt file
    :rtype: str
    :raises ValueError: If the format is unsupported, the archive is damaged, or it holds no .txt file
    """
    if archive_path.suffix == ".zip":
        reader = _read_zip
    elif archive_path.suffixes[-2:] == [".tar", ".xz"]:
        reader = _read_tar_xz
    elif archive_path.suffix == ".7z":
        reader = _read_7z
    else:
        raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")

    try:
        return reader(archive_path)
    except ARCHIVE_ERRORS as exc:
        raise ValueError(f"📄❌ Cannot read archive {archive_path.name}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ValueError(f"📄❌ Text file in {archive_path.name} is not UTF-8") from exc


def format_payload(payload: Dict[str, Any]) -> str:
    """
    Render a worker payload as one output line.

    :param dict payload: Payload sent by a worker

    :return: "<expression> -> <postfix> = <result>" or "<expression> -> ERROR: <message>"
    :rtype: str
    """
    if "result" in payload:
        return f"{payload['expression']} -> {payload['postfix']} = {payload['result']}"
    return f"{payload['expression']} -> ERROR: {payload['error']}"


def build_output_path(input_path: Path) -> Path:
    """
    Construct the default results path next to the input file.

    Examples
    --------
    input: resources/operations.txt
    output: resources/operations_txt_results.txt

    input: resources/operations.tar.xz
    output: resources/operations_tar_xz_results.txt

    :param input_path: Path to the input file
    :return: Path to the output file
    """
    stem = input_path.name
    for suffix in input_path.suffixes:
        stem = stem[: -len(suffix)]
    suffix_safe = "".join(input_path.suffixes).replace(".", "_")
    return input_path.with_name(f"{stem}{suffix_safe}_results.txt")


class BatchRunner(BaseModel):
    """
    Evaluate every line of an input file in its own worker process.

    Features:
        - Spawns one worker process per expression line.
        - Writes results immediately to disk as soon as a worker finishes.
        - Ensures each worker is joined immediately after finishing.
        - Runs at most max_workers workers at once (CPU count by default).
    """

    # Allow arbitrary types like multiprocessing.Connection
    model_config = ConfigDict(arbitrary_types_allowed=True)

    output_file: Path = Field(..., description="Path where results are written")
    max_workers: Optional[int] = Field(default=None, ge=1, description="Maximum concurrent workers")

    def load_lines(self, input_file: FilePath) -> List[str]:
        """
        Read expression lines from a text file or an archive holding one.

        :param FilePath input_file: Path to a .txt file or a .zip, .tar.xz or .7z archive

        :return: Non-empty, stripped lines
        :rtype: List[str]
        :raises ValueError: If the archive is unsupported, damaged, or contains no .txt file
        """
        if input_file.suffix == ".txt":
            content = input_file.read_text(encoding="utf-8")
        else:
            content = read_archive_text(input_file)
        return [line.strip() for line in content.splitlines() if line.strip()]

    def _spawn_worker(self, request: OperationRequest, line_number: int) -> Tuple[Process, Connection]:
        """
        Spawn a WorkerProcess for the given request and return process and pipe.

        :param OperationRequest request: Expression and bindings
        :param int line_number: Line number of the expression in the input

        :return: Tuple of (Process, parent_pipe)
        :rtype: Tuple[Process, Connection]
        """
        parent_conn, child_conn = Pipe(duplex=False)
        worker = WorkerProcess(conn=child_conn, request=request, line_number=line_number)
        process = Process(target=worker.run, name=f"line-{line_number}")
        process.start()
        # The child owns its end now
        child_conn.close()
        return process, parent_conn

    def _collect_finished_workers(
        self, active_workers: List[Tuple[Process, Connection]], f_out: IO[str]
    ) -> int:
        """
        Collect results from all finished workers and write them to the output file.

        Finished workers are removed from active_workers. Blocks until at least
        one worker has something to report.

        :param list active_workers: List of tuples (Process, Pipe)
        :param f_out: Open file handle for writing results

        :return: Number of collected payloads that hold an error
        :rtype: int
        """
        wait([pipe_conn for _, pipe_conn in active_workers])

        failures = 0
        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn = active_workers[i]
            if not pipe_conn.poll():
                continue
            try:
                payload = pipe_conn.recv()
            except EOFError:
                payload = {"expression": f"<{proc.name}>", "error": "Worker exited without a result"}
            pipe_conn.close()
            proc.join()
            active_workers.pop(i)

            if "error" in payload:
                failures += 1
            f_out.write(format_payload(payload) + "\n")
            f_out.flush()
        return failures

    def _reject_line(self, line: str, line_number: int, error: str, f_out: IO[str]) -> int:
        """Write the error of a line that never reached a worker. Returns 1, the failure count."""
        logger.error(f"👷❌ Rejected line {line_number}: {line!r}")
        f_out.write(format_payload({"expression": line, "error": error}) + "\n")
        f_out.flush()
        return 1

    def run(self, input_file: FilePath) -> int:
        """
        Evaluate every line of the input file and write results to output_file.

        Steps:
            1. Load expression lines from the file or archive.
            2. Parse each line into a request; unparsable lines are reported directly.
            3. Spawn worker processes for each request, respecting max_workers.
            4. Write each result as soon as its worker finishes.

        :param FilePath input_file: Path to the input file or archive

        :return: Number of lines that failed to evaluate
        :rtype: int
        :raises ValueError: If the input cannot be read
        """
        lines: List[str] = self.load_lines(input_file)
        logger.info(f"📄 Loaded {len(lines)} expressions from {input_file}")

        max_workers: int = max(1, min(self.max_workers or cpu_count(), len(lines)))
        active_workers: List[Tuple[Process, Connection]] = []
        failures = 0

        with self.output_file.open("w", encoding="utf-8") as f_out:
            for line_number, line in enumerate(lines, start=1):
                try:
                    request = split_line(line)
                except ValidationError as exc:
                    failures += self._reject_line(line, line_number, exc.errors()[0]["msg"], f_out)
                    continue
                except ExpressionError as exc:
                    failures += self._reject_line(line, line_number, str(exc), f_out)
                    continue

                # Wait until a worker slot is available
                while len(active_workers) >= max_workers:
                    failures += self._collect_finished_workers(active_workers, f_out)

                active_workers.append(self._spawn_worker(request, line_number))

            # Collect remaining active workers
            while active_workers:
                failures += self._collect_finished_workers(active_workers, f_out)

        logger.info(f"✅ Results written to {self.output_file} ({failures} failed)")
        return failures
