"""Audio preparation: WAV inspection via scipy, conversion via ffmpeg.

Julius' acoustic models expect 16kHz mono 16-bit PCM. Inputs already in
that shape are used as they are; anything else goes through ffmpeg.
"""

import logging
import subprocess
from pathlib import Path

import numpy as np
import scipy.io.wavfile as wavfile

logger = logging.getLogger(__name__)

SAMPLE_RATE = 16000


def get_duration(path: Path) -> float:
    """Duration of a WAV file in seconds, from its header and frame count."""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    sr, data = wavfile.read(str(path), mmap=True)
    return len(data) / sr if sr else 0.0


def is_julius_ready(path: Path) -> bool:
    """True if ``path`` is a 16kHz mono int16 WAV."""
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    try:
        sr, data = wavfile.read(str(path), mmap=True)
    except ValueError:
        # not a RIFF/WAVE file scipy can read
        return False
    return sr == SAMPLE_RATE and data.ndim == 1 and data.dtype == np.int16


def extract_audio(input_path: Path, output_path: Path) -> Path:
    """Extract/resample audio to 16kHz mono 16-bit WAV for Julius."""
    cmd = [
        "ffmpeg", "-y", "-i", str(input_path),
        "-vn", "-ar", str(SAMPLE_RATE), "-ac", "1",
        "-c:a", "pcm_s16le", "-f", "wav",
        str(output_path),
    ]
    subprocess.run(
        cmd, capture_output=True, text=True, timeout=120,
    ).check_returncode()
    return output_path


def prepare_audio(source: Path | bytes, work_dir: Path) -> Path:
    """Return a Julius-ready WAV for ``source``, converting into ``work_dir`` if needed.

    Args:
        source: Path to any audio/video file ffmpeg can read, or the bytes
            of a WAV file.
        work_dir: Directory for intermediate files.
    """
    work_dir = Path(work_dir)
    if isinstance(source, (bytes, bytearray)):
        path = work_dir / "input_raw.wav"
        path.write_bytes(source)
    else:
        path = Path(source)

    if is_julius_ready(path):
        return path

    logger.info(f"Converting {path.name} to {SAMPLE_RATE}Hz mono WAV")
    return extract_audio(path, work_dir / "input_16k.wav")
