"""Tests for audio preparation."""

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import numpy as np
import pytest
import scipy.io.wavfile as wavfile

from kanalign.audio import (
    SAMPLE_RATE,
    extract_audio,
    get_duration,
    is_julius_ready,
    prepare_audio,
)


def _write_wav(path: Path, sr: int = SAMPLE_RATE, seconds: float = 0.5,
               dtype=np.int16, channels: int = 1) -> Path:
    n = int(sr * seconds)
    t = np.arange(n) / sr
    tone = 0.3 * np.sin(2 * np.pi * 440 * t)
    if np.issubdtype(dtype, np.integer):
        data = (tone * np.iinfo(dtype).max).astype(dtype)
    else:
        data = tone.astype(dtype)
    if channels > 1:
        data = np.stack([data] * channels, axis=1)
    wavfile.write(str(path), sr, data)
    return path


def test_get_duration(tmp_path):
    assert get_duration(_write_wav(tmp_path / "a.wav", seconds=0.5)) == pytest.approx(0.5)


def test_get_duration_stereo_counts_frames(tmp_path):
    path = _write_wav(tmp_path / "st.wav", sr=44100, seconds=0.25, channels=2)
    assert get_duration(path) == pytest.approx(0.25)


def test_get_duration_missing(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_duration(tmp_path / "missing.wav")


def test_julius_ready(tmp_path):
    assert is_julius_ready(_write_wav(tmp_path / "ok.wav")) is True


@pytest.mark.parametrize("kwargs", [
    {"sr": 44100},
    {"channels": 2},
    {"dtype": np.float32},
])
def test_not_julius_ready(tmp_path, kwargs):
    assert is_julius_ready(_write_wav(tmp_path / "x.wav", **kwargs)) is False


def test_non_wav_not_ready(tmp_path):
    path = tmp_path / "speech.mp3"
    path.write_bytes(b"ID3\x04\x00\x00\x00\x00\x00\x00")
    assert is_julius_ready(path) is False


def test_prepare_audio_passes_through_ready_wav(tmp_path):
    wav = _write_wav(tmp_path / "ok.wav")
    with patch("kanalign.audio.extract_audio") as mock_extract:
        assert prepare_audio(wav, tmp_path) == wav
        mock_extract.assert_not_called()


def test_prepare_audio_converts(tmp_path):
    wav = _write_wav(tmp_path / "cd.wav", sr=44100)
    with patch("kanalign.audio.extract_audio") as mock_extract:
        mock_extract.side_effect = lambda src, dst: dst
        out = prepare_audio(wav, tmp_path / "work")
    assert out == tmp_path / "work" / "input_16k.wav"
    mock_extract.assert_called_once_with(wav, out)


def test_prepare_audio_from_bytes(tmp_path):
    data = _write_wav(tmp_path / "src.wav").read_bytes()
    work = tmp_path / "work"
    work.mkdir()
    out = prepare_audio(data, work)
    assert out == work / "input_raw.wav"
    assert out.read_bytes() == data


@patch("kanalign.audio.subprocess.run")
def test_extract_audio_command(mock_run, tmp_path):
    mock_run.return_value = subprocess.CompletedProcess([], 0, stdout="", stderr="")
    extract_audio(Path("in.mp4"), tmp_path / "out.wav")
    cmd = mock_run.call_args[0][0]
    assert cmd[0] == "ffmpeg"
    assert cmd[cmd.index("-ar") + 1] == "16000"
    assert cmd[cmd.index("-ac") + 1] == "1"
    assert cmd[cmd.index("-c:a") + 1] == "pcm_s16le"


@pytest.mark.integration
@pytest.mark.skipif(shutil.which("ffmpeg") is None, reason="ffmpeg not installed")
def test_extract_audio_real_ffmpeg(tmp_path):
    src = _write_wav(tmp_path / "cd.wav", sr=44100, channels=2)
    out = extract_audio(src, tmp_path / "out.wav")
    assert is_julius_ready(out)
