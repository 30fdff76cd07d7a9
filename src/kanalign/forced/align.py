"""Aligner interface and backends."""

import logging
import os
import shutil
import subprocess
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from kanalign.forced.grammar import check_grammar
from kanalign.types import Grammar, JuliusError

logger = logging.getLogger(__name__)

JULIUS_BIN = os.environ.get("KANALIGN_JULIUS_BIN", "julius")
JULIUS_HMM = os.environ.get("KANALIGN_JULIUS_HMM")
JULIUS_HLIST = os.environ.get("KANALIGN_JULIUS_HLIST")


class Aligner(ABC):
    """Abstract base for forced-alignment backends."""

    name: str = "base"
    needs_audio: bool = True    # False for backends that never read the WAV

    @abstractmethod
    def process(self, grammar: Grammar, audio_path: Path) -> str:
        """Align audio against a grammar.

        Args:
            grammar: Word dictionary and DFA for the expected phonemes.
            audio_path: 16kHz mono 16-bit WAV.

        Returns:
            The recognizer's raw text report.
        """


class JuliusAligner(Aligner):
    """Runs the Julius binary with ``-palign`` on a generated grammar.

    The grammar, file list and audio reference are written to a
    temporary directory that is removed once Julius exits. No timeout is
    applied unless one is given.
    """

    name = "julius"

    def __init__(
        self,
        hmm: str | Path | None = None,
        julius_bin: str | Path | None = None,
        hlist: str | Path | None = None,
        extra_args: list[str] | None = None,
        timeout: float | None = None,
        **kwargs,
    ):
        hmm = hmm or JULIUS_HMM
        if not hmm:
            raise ValueError(
                "Julius needs an acoustic model: pass hmm= or set KANALIGN_JULIUS_HMM"
            )
        self.hmm = Path(hmm)
        self.julius_bin = str(julius_bin or JULIUS_BIN)
        hlist = hlist or JULIUS_HLIST
        self.hlist = Path(hlist) if hlist else None
        self.extra_args = list(extra_args or [])
        self.timeout = timeout

    def build_command(self, dfa_path: Path, dict_path: Path, filelist_path: Path) -> list[str]:
        cmd = [
            self.julius_bin,
            "-h", str(self.hmm),
            "-dfa", str(dfa_path),
            "-v", str(dict_path),
            "-input", "rawfile",
            "-filelist", str(filelist_path),
            "-palign",
        ]
        if self.hlist is not None:
            cmd.extend(["-hlist", str(self.hlist)])
        cmd.extend(self.extra_args)
        return cmd

    def process(self, grammar: Grammar, audio_path: Path) -> str:
        check_grammar(grammar)
        if shutil.which(self.julius_bin) is None:
            raise JuliusError(f"Julius executable not found: {self.julius_bin}")

        with tempfile.TemporaryDirectory(prefix="kanalign-") as tmp:
            work = Path(tmp)
            dict_path = work / "input.dict"
            dfa_path = work / "input.dfa"
            filelist_path = work / "filelist.txt"
            dict_path.write_text(grammar.dict_text, encoding="utf-8")
            dfa_path.write_text(grammar.dfa_text, encoding="utf-8")
            filelist_path.write_text(f"{Path(audio_path).resolve()}\n", encoding="utf-8")

            cmd = self.build_command(dfa_path, dict_path, filelist_path)
            logger.debug(f"Julius args: {' '.join(cmd)}")
            try:
                result = subprocess.run(
                    cmd, capture_output=True, text=True, timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as e:
                raise JuliusError(f"Julius timed out after {self.timeout}s") from e

        if result.returncode != 0:
            raise JuliusError(
                f"Julius exited with status {result.returncode}: "
                f"{result.stderr.strip()[-500:]}"
            )
        logger.debug(f"Julius output: {len(result.stdout.splitlines())} lines")
        return result.stdout


class ReportAligner(Aligner):
    """Replays a saved Julius log instead of running the recognizer."""

    name = "report"
    needs_audio = False

    def __init__(self, report: str | Path | None = None, **kwargs):
        if report is None:
            raise ValueError("The report aligner needs a saved Julius log (report=...)")
        self.report = Path(report)

    def process(self, grammar: Grammar, audio_path: Path | None) -> str:
        check_grammar(grammar)
        if not self.report.exists():
            raise FileNotFoundError(f"File not found: {self.report}")
        logger.info(f"Replaying Julius report: {self.report}")
        return self.report.read_text(encoding="utf-8")


_ALIGNERS = {
    "julius": JuliusAligner,
    "report": ReportAligner,
}


def get_aligner(name: str, **kwargs) -> Aligner:
    """Get an aligner backend by name.

    Modes:
        "julius" — run Julius with ``-palign`` (needs an acoustic model).
        "report" — read a previously captured Julius log (``report=``).
    """
    if name not in _ALIGNERS:
        raise ValueError(
            f"Unknown aligner: {name!r}. Available: {list(_ALIGNERS.keys())}"
        )
    return _ALIGNERS[name](**kwargs)
