#!/usr/bin/env python3
"""
sherpa-asr command line

Usage:
    sherpa-asr file audio.wav --model-dir ~/models/paraformer-zh
    sherpa-asr stream audio.wav --model-dir ~/models/zipformer-streaming --chunk-ms 100
    sherpa-asr --version
"""

import argparse
import logging
import sys
import time
from typing import List, Optional

from . import __version__
from .audio import chunk_audio, duration_seconds, load_audio
from .batch import BatchSession
from .callback import PrintCallback
from .config import OfflineConfig, OnlineConfig
from .engine import FakeEngine, get_default_engine
from .session import StreamingSession


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="sherpa-asr", description="Speech recognition with sherpa-onnx")
    parser.add_argument("--version", action="store_true", help="Print package and engine versions")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    parser.add_argument("--fake", action="store_true", help="Use the deterministic fake engine")

    sub = parser.add_subparsers(dest="command")

    def common(p):
        p.add_argument("file", help="Audio file (WAV, FLAC, ...)")
        p.add_argument("--model-dir", "-m", required=True, help="Model directory with tokens.txt and .onnx files")
        p.add_argument("--family", "-f", default=None, help="Model family (detected from files by default)")
        p.add_argument("--provider", default=None, help="Execution provider (cpu, cuda, coreml, ...)")
        p.add_argument("--threads", "-t", type=int, default=1, help="Engine threads (default: 1)")
        p.add_argument("--decoding-method", default="greedy_search",
                       choices=["greedy_search", "modified_beam_search"])

    file_parser = sub.add_parser("file", help="Recognize a whole file (offline model)")
    common(file_parser)

    stream_parser = sub.add_parser("stream", help="Feed a file chunk by chunk (streaming model)")
    common(stream_parser)
    stream_parser.add_argument("--chunk-ms", type=int, default=100, help="Chunk duration (default: 100)")
    stream_parser.add_argument("--no-endpoint", action="store_true", help="Disable endpoint detection")
    stream_parser.add_argument("--partials", action="store_true", help="Print partial results")

    return parser


def _options(args) -> dict:
    return {
        "provider": args.provider,
        "num_threads": args.threads,
        "decoding_method": args.decoding_method,
    }


def run_file(args, engine) -> int:
    config = OfflineConfig.from_model_dir(args.model_dir, family=args.family, **_options(args))
    samples, sample_rate = load_audio(args.file)
    audio_s = duration_seconds(samples, sample_rate)

    print(f"File: {args.file}")
    print(f"Model: {config.family}")
    print("Recognizing...\n")

    start = time.perf_counter()
    with BatchSession.open(config, engine=engine) as batch:
        result = batch.transcribe(sample_rate, samples)
    elapsed = time.perf_counter() - start

    print(f"Result: {result.text}")
    print(f"Audio duration: {audio_s * 1000:.0f} ms")
    print(f"Processing time: {elapsed * 1000:.0f} ms")
    if audio_s > 0:
        print(f"RTF: {elapsed / audio_s:.3f}")
    return 0


def run_stream(args, engine) -> int:
    config = OnlineConfig.from_model_dir(
        args.model_dir, family=args.family, enable_endpoint=not args.no_endpoint, **_options(args))
    samples, sample_rate = load_audio(args.file)
    callback = PrintCallback() if args.partials else None

    segments = 0
    with StreamingSession.open(config, engine=engine, callback=callback) as session:
        for result in session.transcribe(chunk_audio(samples, sample_rate, args.chunk_ms), sample_rate):
            if result.is_final:
                segments += 1
                if callback is None:
                    print(f"[{segments}] {result.text}")
        state = session.state
        print(f"\nSamples processed: {state.total_samples_processed}")
        print(f"Segments: {segments}")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    try:
        engine = FakeEngine() if args.fake else get_default_engine()
    except ImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.version:
        print(f"sherpa_asr {__version__}")
        print(f"Engine: {engine.version()}")
        return 0

    if args.command is None:
        parser.print_help()
        return 0

    try:
        if args.command == "file":
            return run_file(args, engine)
        return run_stream(args, engine)
    except (RuntimeError, OSError) as e:
        # AsrError and soundfile errors are RuntimeError subclasses
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
