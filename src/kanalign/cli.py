"""CLI entrypoint for kanalign — subcommand dispatcher."""

import argparse
import json
import logging
import subprocess
import sys
from pathlib import Path


def _add_text_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("text", help="Hiragana text (ー marks a long vowel)")


def _add_align_args(parser: argparse.ArgumentParser) -> None:
    """Add arguments specific to the align subcommand."""
    parser.add_argument("audio", type=Path,
                        help="Audio/video file; converted to 16kHz mono WAV if needed")
    _add_text_arg(parser)
    parser.add_argument("--aligner", default="julius",
                        choices=["julius", "report"],
                        help="Alignment backend (default: julius)")
    parser.add_argument("--report", type=Path, default=None,
                        help="Saved Julius log to replay (with --aligner report)")
    parser.add_argument("--julius-bin", default=None,
                        help="Julius executable (default: $KANALIGN_JULIUS_BIN or 'julius')")
    parser.add_argument("--hmm", default=None,
                        help="Acoustic model hmmdefs (default: $KANALIGN_JULIUS_HMM)")
    parser.add_argument("--hlist", default=None,
                        help="HMM list for triphone models (default: $KANALIGN_JULIUS_HLIST)")
    parser.add_argument("--timeout", type=float, default=None,
                        help="Seconds to wait for Julius (default: no limit)")
    parser.add_argument("--output", type=Path, default=None,
                        help="Write JSON result here instead of stdout")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse CLI arguments with subcommands."""
    parser = argparse.ArgumentParser(
        prog="kanalign",
        description="Hiragana phoneme forced alignment with Julius",
    )
    parser.add_argument("-v", "--verbose", action="store_true", default=False,
                        help="Debug logging, including generated grammars")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    phonemes_parser = subparsers.add_parser(
        "phonemes",
        help="Show the phoneme units for hiragana text",
    )
    _add_text_arg(phonemes_parser)

    grammar_parser = subparsers.add_parser(
        "grammar",
        help="Write Julius .dict/.dfa files for hiragana text",
    )
    _add_text_arg(grammar_parser)
    grammar_parser.add_argument("--output-dir", default=".",
                                help="Output directory (default: .)")
    grammar_parser.add_argument("--name", default="input",
                                help="Base name for the .dict/.dfa files (default: input)")

    align_parser = subparsers.add_parser(
        "align",
        help="Time each hiragana unit in an audio file",
        description="Force-align hiragana text against speech and print per-unit timing as JSON",
    )
    _add_align_args(align_parser)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)

    if args.command == "align" and args.aligner == "report" and args.report is None:
        parser.error("--aligner report requires --report")

    return args


def _report_unknown(unknown) -> None:
    for u in unknown:
        print(f"Warning: {u}", file=sys.stderr)


def _run_phonemes(args: argparse.Namespace) -> None:
    from kanalign.forced.kana import hiragana_to_phonemes

    transcription, unknown = hiragana_to_phonemes(args.text)
    _report_unknown(unknown)
    for unit in transcription.units:
        print(f"{unit.char}\t{' '.join(unit.phonemes)}")
    print(f"Phonemes: {' '.join(transcription.phonemes)}")


def _run_grammar(args: argparse.Namespace) -> None:
    from kanalign.forced.grammar import build_grammar
    from kanalign.forced.kana import hiragana_to_phonemes

    transcription, unknown = hiragana_to_phonemes(args.text)
    _report_unknown(unknown)
    if not transcription.phonemes:
        print(f"Error: no phonemes in {args.text!r}", file=sys.stderr)
        sys.exit(1)
    grammar = build_grammar(transcription.phonemes)

    output_dir = Path(args.output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    dict_path = output_dir / f"{args.name}.dict"
    dfa_path = output_dir / f"{args.name}.dfa"
    dict_path.write_text(grammar.dict_text, encoding="utf-8")
    dfa_path.write_text(grammar.dfa_text, encoding="utf-8")
    print(f"Output:")
    print(f"  {dict_path}")
    print(f"  {dfa_path}")


def _run_align(args: argparse.Namespace) -> None:
    """Run the alignment pipeline."""
    from kanalign.forced import process
    from kanalign.types import AlignmentError

    if not args.audio.exists():
        print(f"Error: file not found: {args.audio}", file=sys.stderr)
        sys.exit(1)

    if args.aligner == "report":
        aligner_kwargs = {"report": args.report}
    else:
        aligner_kwargs = {
            "hmm": args.hmm,
            "julius_bin": args.julius_bin,
            "hlist": args.hlist,
            "timeout": args.timeout,
        }

    try:
        result = process(args.audio, args.text, aligner=args.aligner, **aligner_kwargs)
    except (AlignmentError, ValueError, FileNotFoundError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except subprocess.CalledProcessError as e:
        print(
            f"Error: ffmpeg exited with status {e.returncode}: {(e.stderr or '').strip()[-500:]}",
            file=sys.stderr,
        )
        sys.exit(1)

    if result.truncated:
        print(
            f"Warning: alignment truncated after {len(result.segments)} units",
            file=sys.stderr,
        )

    output = json.dumps(result.to_dict(), ensure_ascii=False, indent=2)
    if args.output is not None:
        args.output.parent.mkdir(parents=True, exist_ok=True)
        args.output.write_text(output + "\n", encoding="utf-8")
        print(f"Output: {args.output}")
    else:
        print(output)


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint."""
    args = parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=level, format="%(name)s %(levelname)s: %(message)s")

    if args.command == "phonemes":
        _run_phonemes(args)
    elif args.command == "grammar":
        _run_grammar(args)
    elif args.command == "align":
        _run_align(args)


if __name__ == "__main__":
    main()
