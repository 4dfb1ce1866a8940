"""CLI helpers running pipeline operations on local files."""

from __future__ import annotations

import json
from argparse import ArgumentParser, Namespace, _SubParsersAction
from pathlib import Path

from ...config import Config
from ...core.utils import human_size, resolve_path
from ...core.validator import validate_blob
from ...engine import TransformEngine
from ...operations import (
    DEFAULT_WATERMARK_FONT_SIZE,
    DEFAULT_WATERMARK_OPACITY,
    DEFAULT_WATERMARK_ROTATION,
    DEFAULT_WATERMARK_TEXT,
)


def configure_parser(subparsers: _SubParsersAction[ArgumentParser]) -> None:
    merge = subparsers.add_parser("merge", help="Merge multiple PDFs into one")
    merge.add_argument("inputs", nargs="+", help="Input PDF files, in order")
    merge.add_argument("output", help="Output PDF path")
    merge.set_defaults(handler=_merge)

    split = subparsers.add_parser("split", help="Split a PDF into several files")
    split.add_argument("input", help="Input PDF file")
    split.add_argument("output", help="Output directory")
    split.add_argument("--pages", default="all", help='"all" or ranges such as "1-3,5"')
    split.set_defaults(handler=_split)

    compress = subparsers.add_parser("compress", help="Losslessly compress a PDF")
    compress.add_argument("input", help="Input PDF file")
    compress.add_argument("output", help="Output PDF path")
    compress.add_argument("--level", type=int, choices=[1, 2, 3], default=None)
    compress.set_defaults(handler=_compress)

    watermark = subparsers.add_parser("watermark", help="Stamp a text watermark on every page")
    watermark.add_argument("input", help="Input PDF file")
    watermark.add_argument("output", help="Output PDF path")
    watermark.add_argument("--text", default=DEFAULT_WATERMARK_TEXT)
    watermark.add_argument("--opacity", type=float, default=DEFAULT_WATERMARK_OPACITY)
    watermark.add_argument("--rotation", type=float, default=DEFAULT_WATERMARK_ROTATION)
    watermark.add_argument("--font-size", type=float, default=DEFAULT_WATERMARK_FONT_SIZE)
    watermark.set_defaults(handler=_watermark)

    metadata = subparsers.add_parser("metadata", help="Print document metadata as JSON")
    metadata.add_argument("input", help="Input PDF file")
    metadata.set_defaults(handler=_metadata)

    text = subparsers.add_parser("text", help="Print extracted text")
    text.add_argument("input", help="Input PDF file")
    text.add_argument("--ocr", action="store_true", help="OCR pages without a text layer")
    text.set_defaults(handler=_text)


def _read(path: str, config: Config) -> bytes:
    data = resolve_path(path).read_bytes()
    validate_blob(data, config)
    return data


def _write(path: str, data: bytes) -> Path:
    destination = resolve_path(path)
    destination.parent.mkdir(parents=True, exist_ok=True)
    destination.write_bytes(data)
    return destination


def _merge(args: Namespace, config: Config) -> None:
    engine = TransformEngine(config)
    documents = [_read(path, config) for path in args.inputs]
    destination = _write(args.output, engine.merge(documents))
    print(destination)


def _split(args: Namespace, config: Config) -> None:
    engine = TransformEngine(config)
    documents = engine.split(_read(args.input, config), args.pages)
    output_dir = resolve_path(args.output)
    output_dir.mkdir(parents=True, exist_ok=True)
    stem = Path(args.input).stem
    width = len(str(len(documents)))
    for index, data in enumerate(documents, start=1):
        print(_write(str(output_dir / f"{stem}_{index:0{width}d}.pdf"), data))


def _compress(args: Namespace, config: Config) -> None:
    engine = TransformEngine(config)
    result = engine.compress(_read(args.input, config), args.level)
    _write(args.output, result.data)
    print(
        f"{human_size(result.original_size)} -> {human_size(result.compressed_size)} "
        f"({result.compression_ratio:.1%}, saved {human_size(result.bytes_saved)})"
    )


def _watermark(args: Namespace, config: Config) -> None:
    engine = TransformEngine(config)
    data = engine.watermark(
        _read(args.input, config),
        args.text,
        opacity=args.opacity,
        rotation=args.rotation,
        font_size=args.font_size,
    )
    print(_write(args.output, data))


def _metadata(args: Namespace, config: Config) -> None:
    engine = TransformEngine(config)
    print(json.dumps(engine.extract_metadata(_read(args.input, config)).as_dict(), indent=2))


def _text(args: Namespace, config: Config) -> None:
    engine = TransformEngine(config)
    print(engine.extract_text(_read(args.input, config), args.ocr).text)
