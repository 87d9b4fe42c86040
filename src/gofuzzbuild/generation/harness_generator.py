"""Harness generator: render the cgo bridge between libFuzzer and a Go fuzz function."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from gofuzzbuild.core.exceptions import GenerationError

log = logging.getLogger(__name__)

#: Symbol the fuzzing driver calls for every input.
ENTRY_SYMBOL = "LPBMutatorTestOneInput"

# Go main package exporting ENTRY_SYMBOL; built with -buildmode=c-archive.
HARNESS_TEMPLATE = '''// Code generated by gofuzzbuild; DO NOT EDIT.

//go:build ignore
// +build ignore

package main

import (
	"unsafe"

	target {import_path}
)

// #include <stdint.h>
import "C"

//export {symbol}
func {symbol}(data *C.char, size C.size_t) C.int {{
	s := unsafe.Slice((*byte)(unsafe.Pointer(data)), size)
	target.{func}(s)
	return 0
}}

func main() {{
}}
'''


def go_quote(value: str) -> str:
    """Quote ``value`` as a Go interpreted string literal."""
    return json.dumps(value, ensure_ascii=False)


def render_harness(import_path: str, func_name: str) -> str:
    """Return the harness source calling ``<import_path>.<func_name>(data)``."""
    return HARNESS_TEMPLATE.format(
        import_path=go_quote(import_path),
        symbol=ENTRY_SYMBOL,
        func=func_name,
    )


@contextmanager
def harness_file(source: str, directory: Path | str = ".") -> Iterator[Path]:
    """Write ``source`` to a fresh ``main.*.go`` in ``directory``; remove it on exit.

    Raises:
        GenerationError: the file could not be created or written.
    """
    try:
        fd, name = tempfile.mkstemp(prefix="main.", suffix=".go", dir=str(directory))
    except OSError as e:
        raise GenerationError(f"failed to create temporary file: {e}") from e
    path = Path(name)
    try:
        try:
            f = os.fdopen(fd, "w", encoding="utf-8")
        except OSError as e:
            os.close(fd)
            raise GenerationError(f"failed to open {path.name}: {e}") from e
        try:
            with f:
                f.write(source)
        except OSError as e:
            raise GenerationError(f"failed to write {path.name}: {e}") from e
        log.info("Wrote harness %s", path)
        yield path
    finally:
        path.unlink(missing_ok=True)
        log.debug("Removed harness %s", path)
