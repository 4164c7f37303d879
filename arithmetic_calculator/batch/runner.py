"""Evaluate a file of arithmetic expressions using worker processes."""
from multiprocessing import Pipe, Process, cpu_count
from multiprocessing.connection import Connection
from pathlib import Path
import tarfile
import tempfile
from typing import List, TextIO, Tuple
import zipfile

import py7zr
from pydantic import BaseModel, ConfigDict, Field, FilePath, TypeAdapter

from arithmetic_calculator.batch.worker import WorkerProcess
from arithmetic_calculator.common.logger import logger
from arithmetic_calculator.common.operations import Outcome, describe


# Rebuilds the outcome model from a worker payload
_OUTCOME_ADAPTER: TypeAdapter = TypeAdapter(Outcome)


class BatchRunner(BaseModel):
    """
    Evaluate every expression of an operations file and write the outcomes to disk.

    Features:
        - Reads plain .txt files or the first .txt inside a .zip, .tar.xz or .7z archive.
        - Spawns one worker process per expression.
        - Writes results immediately to disk as soon as a worker finishes.
        - Ensures each worker is destroyed immediately after finishing.
        - Keeps at most max_workers workers alive at once.
    """

    model_config = ConfigDict(frozen=True)

    output_file: Path = Field(..., description="Path to write computation results")
    max_workers: int = Field(default_factory=cpu_count, ge=1, description="Maximum concurrent worker processes")

    def _load_expressions(self, input_file: FilePath) -> List[str]:
        """
        Read an operations file or archive and return its non-empty lines.

        :param FilePath input_file: Path to the input file or archive

        :return: List of non-empty expression lines
        :rtype: List[str]
        """
        if input_file.suffix == ".txt":
            content: str = input_file.read_text(encoding="utf-8")
        else:
            content = self._extract_archive(input_file)
        return [line.strip() for line in content.splitlines() if line.strip()]

    def _extract_archive(self, archive_path: FilePath) -> str:
        """
        Extract the first .txt file found in a supported archive and return its content as a string.

        Supported formats:
        - .zip
        - .tar.xz
        - .7z

        :param FilePath archive_path: Path to the archive file

        :return: Content of the extracted .txt file
        :rtype: str
        :raises ValueError: If no .txt file is found or format is unsupported
        """
        with tempfile.TemporaryDirectory() as tmpdir:
            tmpdir_path = Path(tmpdir)
            if archive_path.suffix == ".zip":
                with zipfile.ZipFile(archive_path, "r") as zf:
                    names = [name for name in zf.namelist() if name.endswith(".txt")]
                    if not names:
                        raise ValueError("📄❌ No .txt file found in zip archive")
                    zf.extract(names[0], path=tmpdir_path)
                    return (tmpdir_path / names[0]).read_text(encoding="utf-8")

            if archive_path.suffixes[-2:] == [".tar", ".xz"]:
                with tarfile.open(archive_path, "r:xz") as tf:
                    members = [m for m in tf.getmembers() if m.name.endswith(".txt")]
                    if not members:
                        raise ValueError("📄❌ No .txt file found in tar.xz archive")
                    tf.extract(members[0], path=tmpdir_path, filter="data")
                    return (tmpdir_path / members[0].name).read_text(encoding="utf-8")

            if archive_path.suffix == ".7z":
                with py7zr.SevenZipFile(archive_path, mode="r") as archive:
                    names = [name for name in archive.getnames() if name.endswith(".txt")]
                    if not names:
                        raise ValueError("📄❌ No .txt file found in 7z archive")
                    archive.extract(path=tmpdir_path, targets=[names[0]])
                    return (tmpdir_path / names[0]).read_text(encoding="utf-8")

            raise ValueError(f"📄❌ Unsupported archive format: {archive_path.suffix}")

    def _spawn_worker(self, expr: str, line_number: int) -> Tuple[Process, Connection]:
        """
        Spawn a WorkerProcess for the given expression and return process and pipe.

        :param str expr: Arithmetic expression
        :param int line_number: Line number of expression in input

        :return: Tuple of (Process, parent end of the pipe)
        :rtype: Tuple[Process, Connection]
        """
        parent_conn, child_conn = Pipe(duplex=False)
        worker = WorkerProcess(conn=child_conn, expression=expr, line_number=line_number)
        process = Process(target=worker.run)
        process.start()
        # The child owns the sending end now
        child_conn.close()
        return process, parent_conn

    @staticmethod
    def format_payload(payload: dict) -> str:
        """
        Render one worker payload as an output line (without newline).

        :param dict payload: Message received from a worker

        :return: "<expr> = <value>" or "<expr> -> ERROR: <Kind>: <message>"
        :rtype: str
        """
        outcome: Outcome = _OUTCOME_ADAPTER.validate_python(payload)
        if outcome.ok:
            return f"{payload['expression']} = {describe(outcome)}"
        return f"{payload['expression']} -> ERROR: {describe(outcome)}"

    def _collect_finished_workers(
        self, active_workers: List[Tuple[Process, Connection]], f_out: TextIO
    ) -> int:
        """
        Collect results from all finished workers and write them to the output file.

        Finished workers are removed from the active_workers list.

        :param list active_workers: List of tuples (Process, Connection)
        :param TextIO f_out: Open file handle for writing results

        :return: Number of workers collected
        :rtype: int
        """
        collected: int = 0
        # Iterate in reverse to safely remove finished workers while iterating
        for i in reversed(range(len(active_workers))):
            proc, pipe_conn = active_workers[i]
            # A payload is ready once the worker has sent it, even if it is still exiting
            if not pipe_conn.poll() and proc.is_alive():
                continue
            payload: dict = pipe_conn.recv()
            pipe_conn.close()
            proc.join()
            active_workers.pop(i)
            collected += 1

            # Write output immediately
            f_out.write(self.format_payload(payload) + "\n")
            f_out.flush()
        return collected

    def run(self, input_file: FilePath) -> int:
        """
        Evaluate every expression in input_file and write one line per expression.

        Lines are written in completion order, not input order.

        :param FilePath input_file: Path to the operations file or archive

        :return: Number of expressions evaluated
        :rtype: int
        :raises ValueError: If the archive format is unsupported or contains no .txt file
        """
        expressions: List[str] = self._load_expressions(input_file)
        logger.info(f"📄 Loaded {len(expressions)} expressions from {input_file}")

        active_workers: List[Tuple[Process, Connection]] = []
        with self.output_file.open("w", encoding="utf-8") as f_out:
            for line_number, expr in enumerate(expressions, start=1):
                # Wait until a worker slot is available
                while len(active_workers) >= self.max_workers:
                    if not self._collect_finished_workers(active_workers, f_out):
                        active_workers[0][1].poll(0.05)

                active_workers.append(self._spawn_worker(expr, line_number))

            # Collect remaining active workers
            while active_workers:
                if not self._collect_finished_workers(active_workers, f_out):
                    active_workers[0][1].poll(0.05)

        logger.info(f"✉️ Results written to {self.output_file}")
        return len(expressions)
